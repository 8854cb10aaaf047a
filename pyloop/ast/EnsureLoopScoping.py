import ast

from pyloop.ast.nodes import CFor


def _declared_names(loop : CFor) -> list[str]:
    return [a.targets[0].id for a in loop.init]


class RenameVariable(ast.NodeTransformer):
    """
        Renames every occurrence of a variable, except inside nested counted loops
        that declare a variable of the same name
    """

    def __init__(self, old, new):
        self.old = old
        self.new = new

    def visit_Name(self, node) -> ast.Name:
        if node.id == self.old:
            node.id = self.new
        return node

    def visit_CFor(self, node) -> CFor:
        if self.old not in _declared_names(node):
            return ast.NodeTransformer.generic_visit(self, node)

        # only the initial values are evaluated in the enclosing scope
        for assign in node.init:
            assign.value = self.visit(assign.value)
        return node


class EnsureLoopScoping(ast.NodeTransformer):
    """
        AST transformer that makes the variables declared in the init clause of a
        counted loop local to that loop by giving them a loop-unique identifier
    """

    def __init__(self):
        self.tmp_counter = 0

    def _make_varname(self, name):
        self.tmp_counter += 1
        return '%s__loop%d' % (name, self.tmp_counter)

    def visit_CFor(self, node) -> CFor:
        for name in _declared_names(node):
            renamer = RenameVariable(name, self._make_varname(name))
            for assign in node.init:
                assign.targets = [renamer.visit(t) for t in assign.targets]
            if node.test is not None:
                node.test = renamer.visit(node.test)
            if node.update is not None:
                node.update = renamer.visit(node.update)
            node.body = [renamer.visit(s) for s in node.body]

        # nested loops
        return ast.NodeTransformer.generic_visit(self, node)
