"""
Oracle harness for break/continue handling.

The fixture exercises break and continue in nested loops of each form
(post-condition, pre-condition and counted, plus a counted loop without any
header clause) and checks exact return values and the exact order of the
trace.
"""

from typing import List, Optional

from pyloop import configs
from pyloop.preprocessor import load_program
from pyloop.runtime import Trace, AssertionFailure, check_assertion


FIXTURE = '''\
def main():
    assert test_do() == 5, "failed. 1"
    assert test_while() == 5, "failed. 2"
    assert test_for() == 4, "failed. 3"
    test_for_empty()

    print("done.")


def test_do():
    i = 0
    with do_while(postinc(i) < 10):
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        j = 0
        with do_while(postinc(j) < 5):
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

    return i


def test_while():
    i = 0
    while postinc(i) < 10:
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        j = 0
        while postinc(j) < 5:
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

    return i


def test_for():
    j = 0
    with counted(i := 0, i < 10, postinc(i)):
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        with counted(j := 0, j < 5, postinc(j)):
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

        j = i

    return j


def test_for_empty():
    with counted():
        break
'''


class Scenario:
    def __init__(self, function : str, expected : Optional[int], message : Optional[str], expected_trace : List[str]):
        self.function = function
        self.expected = expected
        self.message = message
        self.expected_trace = expected_trace

    def __str__(self):
        return self.function


def _outer_iterations(indices, inner):
    trace = []
    for i in indices:
        trace.append('i = %d' % i)
        trace.extend('j = %d' % j for j in inner)
    return trace


SCENARIOS = [
    # outer body skipped for 2 by continue, left at 5 by break;
    # inner loops print until continue at 2 and break at 3
    Scenario('test_do', 5, 'failed. 1', _outer_iterations([0, 1, 3, 4], [0, 1])),
    Scenario('test_while', 5, 'failed. 2', _outer_iterations([1, 3, 4], [1])),
    Scenario('test_for', 4, 'failed. 3', _outer_iterations([0, 1, 3, 4], [0, 1])),
    Scenario('test_for_empty', None, None, []),
]

DONE = 'done.'

# trace of a complete run of FIXTURE
EXPECTED_TRACE = [line for s in SCENARIOS for line in s.expected_trace] + [DONE]


def make_engine(config : str = 'TreeInterpreter', source : str = FIXTURE, trace : Optional[Trace] = None, max_iterations : Optional[int] = 10000):
    tree = load_program(source, filename='<fixture>')
    return configs.load_engine(config).get_engine(tree, trace=trace, max_iterations=max_iterations)


def run_fixture(engine):
    """
    runs main() of the fixture, raises AssertionFailure on the first failing assertion
    """
    return engine.run_program()


def check_scenarios(engine, scenarios : List[Scenario] = SCENARIOS):
    """
    calls every scenario routine in order and checks its return value and the
    trace it produced; emits the success marker when all of them pass
    """
    trace = engine.trace
    for scenario in scenarios:
        mark = len(trace)
        value = engine.call(scenario.function)
        if scenario.expected is not None:
            check_assertion(value == scenario.expected, scenario.message)
        produced = trace.since(mark)
        if produced != scenario.expected_trace:
            raise AssertionFailure('%s: unexpected trace %s, expected %s' % (scenario, produced, scenario.expected_trace))
    trace.emit(DONE)
