#!/usr/bin/env python

from enum import Enum

import ast

from pyloop.ast.nodes import DoWhile, CFor
from pyloop.values import has_side_effects, trace_builtin
from pyloop.utils.visual import Graphable

from pyloop import log



class CFANode:
    index = 0

    def __init__(self):
        self.node_id = CFANode.index
        self.entering_edges = list()
        self.leaving_edges = list()
        CFANode.index += 1

    def __str__(self):
        return "(%s)" % str(self.node_id)

    @staticmethod
    def merge(a : 'CFANode', b : 'CFANode') -> 'CFANode':
        for entering_edge in b.entering_edges:
            entering_edge.successor = a
            a.entering_edges.append(entering_edge)
        for leaving_edge in b.leaving_edges:
            leaving_edge.predecessor = a
            a.leaving_edges.append(leaving_edge)
        b.entering_edges = list()
        b.leaving_edges = list()
        if CFANode.index == b.node_id + 1:
            CFANode.index -= 1
        return a


class TraverseCFA:
    @staticmethod
    def bfs_edges(root: CFANode):
        waitlist : set[CFANode] = set()
        waitlist.add(root)

        seen : set[CFANode] = set()

        while len(waitlist) > 0:
            n = waitlist.pop()

            if n in seen:
                continue

            for e in n.leaving_edges:
                yield e
            seen.add(n)

            # collect successors
            waitlist.update({e.successor for e in n.leaving_edges})



class InstructionType(Enum):
    STATEMENT = 1
    ASSUMPTION = 2
    TRACE = 3
    ASSERT = 4
    RETURN = 5
    NOP = 6


class Instruction:
    """
    An instruction can have different types:
     - statements (assignments, expressions evaluated for their side effects, break/continue jumps)
     - assumptions (side-effect free, one per branch)
     - trace (calls of print)
     - assertions
     - returns
     - nop (structural edges, e.g. loop back edges)
    Edges that enter the body of a loop are marked with loop_entry.
    """

    def __init__(self, expression, kind=InstructionType.STATEMENT, **params):
        self.kind = kind
        self.expression = expression
        for p, p_val in params.items():
            if not hasattr(self, p):
                setattr(self, p, p_val)

    def __str__(self):
        identifier = str(self.kind).replace('InstructionType.', '')
        if self.kind == InstructionType.NOP:
            return '%s %s' % (identifier, self.text)
        return '%s %s' % (identifier, ast.unparse(self.expression).strip())

    @staticmethod
    def assumption(expression, negated=False, **params):
        if negated:
            expression = ast.UnaryOp(op=ast.Not(), operand=expression,
                lineno=expression.lineno, col_offset=expression.col_offset
            )
        return Instruction(expression, kind=InstructionType.ASSUMPTION, negated=negated, **params)

    @staticmethod
    def statement(expression):
        return Instruction(expression)

    @staticmethod
    def trace(expression : ast.Expr):
        assert isinstance(expression.value, ast.Call)
        return Instruction(expression, kind=InstructionType.TRACE)

    @staticmethod
    def assertion(expression : ast.Assert):
        return Instruction(expression, kind=InstructionType.ASSERT)

    @staticmethod
    def ret(expression : ast.Return):
        assert isinstance(expression, ast.Return)
        return Instruction(expression, kind=InstructionType.RETURN)

    @staticmethod
    def nop(expression, text='', **params):
        return Instruction(expression, kind=InstructionType.NOP, text=text, **params)


class CFAEdge:
    def __init__(self, predecessor, successor, instruction):
        self.predecessor = predecessor
        self.successor = successor
        predecessor.leaving_edges.append(self)
        successor.entering_edges.append(self)
        self.instruction = instruction

    def __str__(self):
        return "%s -%s-> %s" % (
            str(self.predecessor),
            self.label(),
            str(self.successor),
        )

    def label(self) -> str:
        lineno = str(getattr(self.instruction.expression, 'lineno', '?'))
        match self.instruction.kind:
            case InstructionType.ASSUMPTION:
                return lineno + ': [' + ast.unparse(self.instruction.expression).strip() + ']'
            case InstructionType.NOP:
                return '< %s >' % self.instruction.text if self.instruction.text else ''
            case _:
                return lineno + ': ' + ast.unparse(self.instruction.expression).strip()


class CFACreator(ast.NodeVisitor):
    """
    Computes one CFA per function (plus one for the module-level code).

    break and continue are resolved while the CFA is built: they become edges
    to the exit node (break) or the re-test/update node (continue) of the
    innermost loop, taken from break_stack and continue_stack.
    A loop or branch test with side effects is evaluated once into a fresh
    __cond variable, the following assumptions only read that variable.
    """

    def __init__(self):
        self.global_root = CFANode()
        self.entry_point = self.global_root
        self.roots = [self.global_root]
        self.node_stack = list()
        self.node_stack.append(self.global_root)
        self.continue_stack = list()
        self.break_stack = list()
        # function name to ast.FunctionDef
        self.function_def = {}
        # function name to entry-point CFANode
        self.function_entry_point = {}

        self.tmp_counter = 0

    def _append(self, instruction) -> CFAEdge:
        entry_node = self.node_stack.pop()
        exit_node = CFANode()
        edge = CFAEdge(entry_node, exit_node, instruction)
        self.node_stack.append(exit_node)
        return edge

    def _fresh_tmp_var(self) -> str:
        var_name = '__cond_' + str(self.tmp_counter)
        self.tmp_counter += 1
        return var_name

    def _branch(self, entry_node : CFANode, test : ast.expr, inside : CFANode, outside : CFANode, **params):
        """ assumption edges entry_node -[test]-> inside and entry_node -[not test]-> outside """
        if has_side_effects(test):
            var_name = self._fresh_tmp_var()
            assign = ast.Assign(targets=[ast.Name(var_name, ctx=ast.Store())], value=test)
            ast.copy_location(assign, test)
            ast.fix_missing_locations(assign)

            evaluated = CFANode()
            CFAEdge(entry_node, evaluated, Instruction.statement(assign))
            entry_node = evaluated

            test = ast.Name(var_name, ctx=ast.Load())
            ast.copy_location(test, assign)

        CFAEdge(entry_node, inside, Instruction.assumption(test, **params))
        CFAEdge(entry_node, outside, Instruction.assumption(test, negated=True))

    def _visit_loop_body(self, body, entry : CFANode, continue_target : CFANode, break_target : CFANode) -> CFANode:
        """ visits the body starting at entry and returns the node it ends in """
        self.continue_stack.append(continue_target)
        self.break_stack.append(break_target)
        self.node_stack.append(entry)
        for statement in body:
            self.visit(statement)
        body_exit_node = self.node_stack.pop()
        self.continue_stack.pop()
        self.break_stack.pop()
        return body_exit_node

    def visit_Module(self, node : ast.Module):
        for statement in node.body:
            self.visit(statement)

    def visit_FunctionDef(self, node : ast.FunctionDef):
        # for continuing after definition
        self._append(Instruction.nop(node, 'def %s' % node.name))

        root = CFANode()
        self.function_def[node.name] = node
        self.function_entry_point[node.name] = root

        if node.name == 'main':
            self.entry_point = root

        self.node_stack.append(root)
        self.roots.append(root)
        for statement in node.body:
            self.visit(statement)

        # function ends in the node left on the stack
        self.node_stack.pop()
        log.printer.log_debug(1, '[CFACreator] computed CFA of', node.name, 'with entry', root)

    def visit_While(self, node : ast.While):
        head = self.node_stack.pop()
        inside = CFANode()
        outside = CFANode()
        self._branch(head, node.test, inside, outside, loop_entry=True)

        body_exit_node = self._visit_loop_body(node.body, inside, head, outside)
        CFAEdge(body_exit_node, head, Instruction.nop(node))
        self.node_stack.append(outside)

    def visit_DoWhile(self, node : DoWhile):
        entry_node = self.node_stack.pop()
        body_entry = CFANode()
        CFAEdge(entry_node, body_entry, Instruction.nop(node, 'do', loop_entry=True))
        test_node = CFANode()
        outside = CFANode()

        body_exit_node = self._visit_loop_body(node.body, body_entry, test_node, outside)
        CFAEdge(body_exit_node, test_node, Instruction.nop(node))
        self._branch(test_node, node.test, body_entry, outside, loop_entry=True)
        self.node_stack.append(outside)

    def visit_CFor(self, node : CFor):
        for assign in node.init:
            self.visit(assign)

        head = self.node_stack.pop()
        inside = CFANode()
        outside = CFANode()
        update_node = CFANode()
        if node.test is None:
            CFAEdge(head, inside, Instruction.nop(node, 'for (;;)', loop_entry=True))
        else:
            self._branch(head, node.test, inside, outside, loop_entry=True)

        body_exit_node = self._visit_loop_body(node.body, inside, update_node, outside)
        CFAEdge(body_exit_node, update_node, Instruction.nop(node))
        if node.update is not None:
            update = ast.Expr(node.update)
            ast.copy_location(update, node.update)
            CFAEdge(update_node, head, Instruction.statement(update))
        else:
            CFAEdge(update_node, head, Instruction.nop(node))
        self.node_stack.append(outside)

    def visit_Break(self, node : ast.Break):
        entry_node = self.node_stack.pop()
        next_node = CFANode()            # create node for next line after break

        # make edge from entry node to break node
        CFAEdge(
            entry_node, self.break_stack[-1], Instruction.statement(node)
        )

        self.node_stack.append(next_node)

    def visit_Continue(self, node : ast.Continue):
        entry_node = self.node_stack.pop()
        next_node = CFANode()             # create node for next line after continue

        # make edge from entry node to continue node
        CFAEdge(
            entry_node, self.continue_stack[-1], Instruction.statement(node)
        )

        self.node_stack.append(next_node)

    def visit_If(self, node : ast.If):
        entry_node = self.node_stack.pop()
        left = CFANode()
        right = CFANode()
        self._branch(entry_node, node.test, left, right)

        self.node_stack.append(left)
        for statement in node.body:
            self.visit(statement)
        left_exit = self.node_stack.pop()
        self.node_stack.append(right)
        for statement in node.orelse:
            self.visit(statement)
        right_exit = self.node_stack.pop()
        merged_exit = CFANode.merge(left_exit, right_exit)
        self.node_stack.append(merged_exit)

    def visit_Expr(self, node : ast.Expr):
        call = node.value
        if isinstance(call, ast.Call) and isinstance(call.func, ast.Name) and call.func.id == trace_builtin:
            self._append(Instruction.trace(node))
        else:
            self._append(Instruction.statement(node))

    def visit_Assign(self, node : ast.Assign):
        self._append(Instruction.statement(node))

    def visit_Assert(self, node : ast.Assert):
        self._append(Instruction.assertion(node))

    def visit_Pass(self, node : ast.Pass):
        pass

    def visit_Return(self, node : ast.Return):
        self._append(Instruction.ret(node))


class GraphableCFANode(Graphable):
    def __init__(self, node):
        assert isinstance(node, CFANode)
        self.node = node

    def get_node_label(self):
        return str(self.node.node_id)

    def get_edge_labels(self, other):
        return [
            edge.label()
            for edge in self.node.leaving_edges
            if edge.successor == other.node
        ]

    def get_successors(self):
        return [GraphableCFANode(edge.successor) for edge in self.node.leaving_edges]

    def get_node_id(self):
        return self.node.node_id

    def __eq__(self, other):
        return self.node == other.node

    def __hash__(self):
        return self.node.__hash__()
