import ast
import textwrap

import pytest

from pyloop.ast import DoWhile, CFor
from pyloop.preprocessor import load_program, preprocess_ast
from pyloop.runtime import ProgramError
from pyloop.harness import FIXTURE


def lower(source : str) -> ast.Module:
    return preprocess_ast(ast.parse(textwrap.dedent(source)))

def loops(tree, kind):
    return [n for n in ast.walk(tree) if isinstance(n, kind)]


def test_do_while_marker_becomes_post_condition_loop():
    tree = lower('''
        i = 0
        with do_while(postinc(i) < 10):
            print(i)
    ''')
    [loop] = loops(tree, DoWhile)
    assert ast.unparse(loop.test) == 'postinc(i) < 10'
    assert len(loop.body) == 1
    assert loop.lineno == 3


def test_counted_marker_becomes_counted_loop():
    tree = lower('''
        with counted(k := 0, k < 3, postinc(k)):
            pass
    ''')
    [loop] = loops(tree, CFor)
    [init] = loop.init
    assert isinstance(init, ast.Assign)
    assert ast.unparse(init.value) == '0'
    assert loop.test is not None and loop.update is not None


def test_counted_without_clauses():
    [loop] = loops(lower('''
        with counted():
            break
    '''), CFor)
    assert loop.init == []
    assert loop.test is None
    assert loop.update is None
    assert isinstance(loop.body[0], ast.Break)


def test_counted_with_omitted_clauses():
    [loop] = loops(lower('''
        with counted(None, i < 3):
            i = i + 1
    '''), CFor)
    assert loop.init == []
    assert ast.unparse(loop.test) == 'i < 3'
    assert loop.update is None


def test_counted_loop_variable_is_local_to_the_loop():
    tree = load_program(FIXTURE)
    test_for = next(f for f in tree.body if isinstance(f, ast.FunctionDef) and f.name == 'test_for')
    outer, inner = loops(test_for, CFor)

    outer_name = outer.init[0].targets[0].id
    inner_name = inner.init[0].targets[0].id
    assert outer_name.startswith('i__loop')
    assert inner_name.startswith('j__loop')

    # the assignment after the inner loop writes the function's j
    assign = outer.body[-1]
    assert ast.unparse(assign) == 'j = %s' % outer_name
    assert ast.unparse(test_for.body[-1]) == 'return j'
    assert ast.unparse(inner.test) == '%s < 5' % inner_name


def test_redeclared_loop_variable_gets_its_own_name():
    tree = lower('''
        with counted(i := 0, i < 2, postinc(i)):
            with counted(i := i + 10, i < 12, postinc(i)):
                print(i)
    ''')
    outer, inner = loops(tree, CFor)
    outer_name = outer.init[0].targets[0].id
    inner_name = inner.init[0].targets[0].id
    assert outer_name != inner_name
    # the initial value is evaluated in the enclosing scope
    assert ast.unparse(inner.init[0].value) == '%s + 10' % outer_name
    assert ast.unparse(inner.body[0]) == 'print(%s)' % inner_name


def test_augmented_assignment_is_expanded():
    tree = lower('''
        x = 1
        x += 2
    ''')
    assert ast.unparse(tree.body[1]) == 'x = x + 2'


@pytest.mark.parametrize('source,message', [
    ('break', "'break' outside loop"),
    ('if x:\n    continue', "'continue' outside loop"),
    ('def f():\n    break', "'break' outside loop"),
    ('for i in range(3):\n    pass', 'for loop over an iterable'),
    ('try:\n    pass\nexcept Exception:\n    pass', 'exception-based control flow'),
    ('raise ValueError', 'exception-based control flow'),
    ('while x:\n    pass\nelse:\n    pass', 'while ... else'),
    ('x = do_while(1)', 'only valid as a loop header'),
    ('postinc(1)', 'takes exactly one variable'),
    ('with open(f):\n    pass', 'with statement'),
    ('a, b = 1, 2', 'single name'),
    ('return 1', "'return' outside function"),
    ('x = [1, 2]', 'List'),
])
def test_checker_rejects(source, message):
    with pytest.raises(ProgramError, match=message):
        load_program(source)


@pytest.mark.parametrize('source,message', [
    ('with do_while(x) as y:\n    pass', 'cannot bind a name'),
    ('with do_while():\n    pass', 'exactly one test'),
    ('with counted(1, 2):\n    pass', 'name := value'),
    ('with counted(1, 2, 3, 4):\n    pass', 'at most'),
    ('with counted(test=x):\n    pass', 'positional clauses'),
])
def test_malformed_loop_headers(source, message):
    with pytest.raises(ProgramError, match=message):
        load_program(source)


@pytest.mark.parametrize('source', [
    'if True:\n    def f():\n        return 1\n    print(f())',
    'if False:\n    pass\nelse:\n    def f():\n        return 1',
    'while True:\n    def f():\n        return 1\n    break',
    'with do_while(False):\n    def f():\n        return 1',
    'with counted():\n    def f():\n        return 1\n    break',
])
def test_function_definitions_only_at_module_level(source):
    with pytest.raises(ProgramError, match='function definition below module level'):
        load_program(source)


def test_function_definition_inside_function():
    with pytest.raises(ProgramError, match='nested function definition'):
        load_program('def f():\n    if True:\n        def g():\n            return 1')


def test_program_error_reports_line():
    with pytest.raises(ProgramError) as info:
        load_program('x = 0\n\nbreak')
    assert info.value.lineno == 3
    assert str(info.value).startswith('3: ')


def test_fixture_is_accepted():
    tree = load_program(FIXTURE)
    names = [f.name for f in tree.body]
    assert names == ['main', 'test_do', 'test_while', 'test_for', 'test_for_empty']
