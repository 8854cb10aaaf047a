import ast

from pyloop.ast.nodes import DoWhile, CFor
from pyloop.runtime import ProgramError
from pyloop.values import loop_markers


class LowerLoopMarkers(ast.NodeTransformer):
    """
        AST transformer that turns the loop marker headers into loop nodes:
            with do_while(test): ...                -> DoWhile
            with counted(init, test, update): ...   -> CFor
        where init is `name := value` and every clause of counted may be None or left out.
    """

    def visit_With(self, node) -> ast.stmt:
        node = ast.NodeTransformer.generic_visit(self, node)

        if len(node.items) != 1:
            return node
        item = node.items[0]
        call = item.context_expr
        if not (isinstance(call, ast.Call) and isinstance(call.func, ast.Name) and call.func.id in loop_markers):
            return node

        if item.optional_vars is not None:
            raise ProgramError('loop header %s() cannot bind a name' % call.func.id, node)
        if call.keywords:
            raise ProgramError('loop header %s() takes positional clauses only' % call.func.id, node)

        match call.func.id:
            case 'do_while':
                if len(call.args) != 1:
                    raise ProgramError('do_while() takes exactly one test', node)
                loop = DoWhile(body=node.body, test=call.args[0])
            case 'counted':
                if len(call.args) > 3:
                    raise ProgramError('counted() takes at most init, test and update', node)
                init, test, update = (list(call.args) + [None] * 3)[:3]
                loop = CFor(
                    init=self._init(init, node),
                    test=self._clause(test),
                    update=self._clause(update),
                    body=node.body
                )

        ast.copy_location(loop, node)
        return loop

    @staticmethod
    def _clause(expression):
        if expression is None or (isinstance(expression, ast.Constant) and expression.value is None):
            return None
        return expression

    @staticmethod
    def _init(expression, node) -> list[ast.Assign]:
        expression = LowerLoopMarkers._clause(expression)
        if expression is None:
            return []
        if not isinstance(expression, ast.NamedExpr):
            raise ProgramError('init clause of counted() has to be `name := value`', node)

        assign = ast.Assign(
            targets=[ast.Name(expression.target.id, ctx=ast.Store())],
            value=expression.value
        )
        ast.copy_location(assign, expression)
        ast.fix_missing_locations(assign)
        return [assign]
