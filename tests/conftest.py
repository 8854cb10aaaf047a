from pathlib import Path

import pytest

from pyloop.cfa import CFANode


TEST_PROGS = Path(__file__).resolve().parents[1] / 'test_progs'

ENGINES = ['TreeInterpreter', 'CFAExecution']


@pytest.fixture
def test_progs() -> Path:
    return TEST_PROGS


@pytest.fixture(autouse=True)
def reset_cfa_node_index():
    CFANode.index = 0
    yield
