import ast

from pyloop.ast.nodes import DoWhile, CFor
from pyloop.runtime import ProgramError
from pyloop.values import increment_builtins, loop_markers


class ASTChecker(ast.NodeVisitor):
    """
        Checks that a preprocessed AST only uses the constructs the engines can execute.
        Raises ProgramError on the first violation.

        This class can also be considered as documentation of the supported language:
        statements are assignments to a single name, if/else, the three loop forms,
        break, continue, pass, return, assert and expression statements;
        functions are defined at module level with plain positional parameters.
    """

    allowed = (
        ast.Module, ast.Expr, ast.If, ast.Pass, ast.Assert,
        ast.Name, ast.Load, ast.Store,
        ast.BinOp, ast.UnaryOp, ast.BoolOp, ast.Compare, ast.IfExp, ast.NamedExpr,
        ast.operator, ast.unaryop, ast.boolop, ast.cmpop,
    )

    def __init__(self):
        self.loop_depth = 0
        self.in_function = False
        # statements enclosing the current one, module level is 0
        self.block_depth = 0

    def _reject(self, node, what):
        raise ProgramError('%s is not supported' % what, node)

    def _visit_block(self, body):
        self.block_depth += 1
        for statement in body:
            self.visit(statement)
        self.block_depth -= 1

    def _visit_loop_body(self, body):
        self.loop_depth += 1
        self._visit_block(body)
        self.loop_depth -= 1

    def generic_visit(self, node):
        if not isinstance(node, self.allowed):
            self._reject(node, type(node).__name__)
        ast.NodeVisitor.generic_visit(self, node)

    def visit_FunctionDef(self, node):
        if self.in_function:
            self._reject(node, 'nested function definition')
        if self.block_depth > 0:
            self._reject(node, 'function definition below module level')
        if node.decorator_list:
            self._reject(node, 'decorator')
        args = node.args
        if args.posonlyargs or args.vararg or args.kwonlyargs or args.kwarg or args.defaults:
            self._reject(node, 'parameter kind other than positional')

        self.in_function = True
        outer_depth, self.loop_depth = self.loop_depth, 0
        self._visit_block(node.body)
        self.loop_depth = outer_depth
        self.in_function = False

    def visit_If(self, node):
        self.visit(node.test)
        self._visit_block(node.body)
        self._visit_block(node.orelse)

    def visit_While(self, node):
        if node.orelse:
            self._reject(node, 'while ... else')
        self.visit(node.test)
        self._visit_loop_body(node.body)

    def visit_DoWhile(self, node : DoWhile):
        self._visit_loop_body(node.body)
        self.visit(node.test)

    def visit_CFor(self, node : CFor):
        for assign in node.init:
            self.visit(assign)
        if node.test is not None:
            self.visit(node.test)
        if node.update is not None:
            self.visit(node.update)
        self._visit_loop_body(node.body)

    def visit_For(self, node):
        self._reject(node, 'for loop over an iterable')

    def visit_Try(self, node):
        self._reject(node, 'exception-based control flow')

    def visit_Raise(self, node):
        self._reject(node, 'exception-based control flow')

    def visit_With(self, node):
        self._reject(node, 'with statement other than a loop header')

    def visit_Break(self, node):
        if self.loop_depth == 0:
            raise ProgramError("'break' outside loop", node)

    def visit_Continue(self, node):
        if self.loop_depth == 0:
            raise ProgramError("'continue' outside loop", node)

    def visit_Return(self, node):
        if not self.in_function:
            raise ProgramError("'return' outside function", node)
        if node.value is not None:
            self.visit(node.value)

    def visit_Assign(self, node):
        if len(node.targets) != 1 or not isinstance(node.targets[0], ast.Name):
            self._reject(node, 'assignment to anything but a single name')
        self.visit(node.value)

    def visit_AugAssign(self, node):
        # expanded during preprocessing
        assert False, node

    def visit_Constant(self, node):
        if not isinstance(node.value, (int, float, str, type(None))):
            self._reject(node, 'constant of type %s' % type(node.value).__name__)

    def visit_Call(self, node : ast.Call):
        if not isinstance(node.func, ast.Name):
            self._reject(node, 'call of %s' % ast.unparse(node.func))
        if node.keywords:
            self._reject(node, 'keyword argument')
        name = node.func.id
        if name in loop_markers:
            raise ProgramError('%s() is only valid as a loop header' % name, node)
        if name in increment_builtins:
            if len(node.args) != 1 or not isinstance(node.args[0], ast.Name):
                raise ProgramError('%s() takes exactly one variable' % name, node)
        for a in node.args:
            self.visit(a)
