import ast


class DoWhile(ast.stmt):
    """
        Post-condition loop: the body runs before the test is evaluated.
        Produced from `with do_while(test): body`
    """
    _fields = ('body', 'test')


class CFor(ast.stmt):
    """
        Counted loop with init, test and update clauses, each of which may be missing.
        `init` is a list of assignments, `test` and `update` are expressions or None.
        Produced from `with counted(init, test, update): body`
    """
    _fields = ('init', 'test', 'update', 'body')
