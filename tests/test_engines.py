import textwrap

import pytest

from pyloop import configs
from pyloop.harness import FIXTURE, EXPECTED_TRACE, make_engine, run_fixture
from pyloop.preprocessor import load_program
from pyloop.runtime import Trace, AssertionFailure, IterationLimitReached, ProgramError

from conftest import ENGINES


def engine_for(config, source, max_iterations=1000):
    tree = load_program(textwrap.dedent(source))
    return configs.load_engine(config).get_engine(tree, trace=Trace(), max_iterations=max_iterations)

def program_engine(config, path, max_iterations=1000):
    return configs.load_engine(config).get_engine(load_program(path.read_text(), str(path)), trace=Trace(), max_iterations=max_iterations)


def test_available_engines():
    assert configs.available_engines() == sorted(ENGINES)


@pytest.mark.parametrize('config', ENGINES)
def test_fixture_trace(config):
    engine = make_engine(config)
    assert run_fixture(engine) is None
    assert engine.trace.lines == EXPECTED_TRACE
    assert len(EXPECTED_TRACE) == 31


@pytest.mark.parametrize('config', ENGINES)
@pytest.mark.parametrize('function,expected', [
    ('test_do', 5),
    ('test_while', 5),
    ('test_for', 4),
    ('test_for_empty', None),
])
def test_fixture_return_values(config, function, expected):
    assert make_engine(config).call(function) == expected


@pytest.mark.parametrize('config', ENGINES)
def test_nested_mixed_program(config, test_progs):
    engine = program_engine(config, test_progs / 'nested_mixed_safe.py')
    engine.run_program()
    assert engine.trace.lines == ['total = 836']


@pytest.mark.parametrize('config', ENGINES)
def test_module_level_program(config, test_progs):
    engine = program_engine(config, test_progs / 'sum_cubes_safe.py')
    assert engine.run_program() is None
    assert engine.trace.lines == ['81']


@pytest.mark.parametrize('config', ENGINES)
def test_unsafe_program(config, test_progs):
    engine = program_engine(config, test_progs / 'post_increment_unsafe.py')
    with pytest.raises(AssertionFailure, match='final test did not increment'):
        engine.run_program()
    assert engine.trace.lines == ['i = 1', 'i = 2', 'i = 3']


@pytest.mark.parametrize('config', ENGINES)
def test_endless_loop_hits_the_limit(config, test_progs):
    engine = program_engine(config, test_progs / 'endless_loop.py', max_iterations=200)
    with pytest.raises(IterationLimitReached):
        engine.run_program()


def test_invalid_program_is_rejected(test_progs):
    with pytest.raises(ProgramError, match="'break' outside loop"):
        load_program((test_progs / 'break_outside_loop_invalid.py').read_text())


@pytest.mark.parametrize('config', ENGINES)
def test_engines_agree_on_iteration_count(config):
    engine = engine_for(config, '''
        def main():
            i = 0
            with do_while(postinc(i) < 3):
                with counted(k := 0, k < 2, postinc(k)):
                    continue
                while True:
                    break
            return i
    ''')
    assert engine.run_program() == 4
    # 4 outer iterations with 2 counted and 1 pre-condition iteration each
    assert engine.iterations == 16


@pytest.mark.parametrize('config', ENGINES)
def test_recursion_through_calls(config):
    engine = engine_for(config, '''
        def fact(n):
            if n <= 1:
                return 1
            return n * fact(n - 1)

        def main():
            with counted(k := 1, k <= 4, preinc(k)):
                print(fact(k))
    ''')
    engine.run_program()
    assert engine.trace.lines == ['1', '2', '6', '24']


@pytest.mark.parametrize('config', ENGINES)
def test_break_inside_branch_of_else(config):
    engine = engine_for(config, '''
        i = 0
        while True:
            if i < 3:
                i = i + 1
            else:
                break
        print(i)
    ''')
    engine.run_program()
    assert engine.trace.lines == ['3']
