import ast
import copy

from pyloop.runtime import ProgramError


class ExpandAugAssign(ast.NodeTransformer):
    """
        AST transformer that transform augmented assignments into normal ones
    """

    def visit_AugAssign(self, node) -> ast.Assign:
        if not isinstance(node.target, ast.Name):
            raise ProgramError('augmented assignment to %s' % ast.unparse(node.target), node)

        lvalue = copy.copy(node.target)
        lvalue.ctx = ast.Store()
        rvalue = copy.copy(node.target)
        rvalue.ctx = ast.Load()

        assign = ast.Assign(
            targets=[lvalue],
            value=ast.BinOp(rvalue, node.op, node.value)
        )
        ast.copy_location(assign, node)
        ast.fix_missing_locations(assign)
        return assign
