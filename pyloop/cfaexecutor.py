#!/usr/bin/env python

from typing import Optional

import ast

from pyloop.cfa import CFACreator, CFAEdge, CFANode, InstructionType
from pyloop.runtime import Trace, IterationLimitReached, check_assertion
from pyloop.values import Valuation, ExpressionEvaluator

from pyloop import log


class CFAExecutor:
    """
    Concrete execution of the CFAs computed by CFACreator.

    Starting at a function's entry node, exactly one leaving edge is enabled
    in every state: either the node has a single non-assumption edge, or it
    has a pair of complementary assumptions. Execution of a function ends
    with a return edge or in a node without leaving edges.
    """

    def __init__(self, cfa : CFACreator, trace : Optional[Trace] = None, max_iterations : Optional[int] = None):
        self.cfa = cfa
        self.trace = trace if trace is not None else Trace()
        self.max_iterations = max_iterations
        self.iterations = 0

    @staticmethod
    def from_tree(tree : ast.Module, trace : Optional[Trace] = None, max_iterations : Optional[int] = None) -> 'CFAExecutor':
        cfa = CFACreator()
        cfa.visit(tree)
        return CFAExecutor(cfa, trace, max_iterations)

    def run_program(self):
        """ runs main() if defined, the module-level code otherwise """
        if 'main' in self.cfa.function_entry_point:
            return self.call('main')
        return self.execute(self.cfa.global_root, Valuation())

    def call(self, name : str, *args):
        if name not in self.cfa.function_entry_point:
            raise NameError("function '%s' is not defined" % name)
        params = [a.arg for a in self.cfa.function_def[name].args.args]
        if len(params) != len(args):
            raise TypeError('%s() takes %d arguments (%d given)' % (name, len(params), len(args)))
        return self.execute(self.cfa.function_entry_point[name], Valuation(zip(params, args)))

    def _call_function(self, name, args):
        return self.call(name, *args)

    def execute(self, node : CFANode, valuation : Valuation):
        evaluator = ExpressionEvaluator(valuation, self.trace, self._call_function)

        while len(node.leaving_edges) > 0:
            edge = self._select_edge(node, evaluator)
            log.printer.log_debug(3, '[CFAExecutor]', edge, valuation)

            if getattr(edge.instruction, 'loop_entry', False):
                self.iterations += 1
                if self.max_iterations is not None and self.iterations > self.max_iterations:
                    raise IterationLimitReached(self.max_iterations)

            instruction = edge.instruction
            match instruction.kind:
                case InstructionType.STATEMENT:
                    self._apply_statement(instruction.expression, evaluator)
                case InstructionType.TRACE:
                    evaluator.evaluate(instruction.expression.value)
                case InstructionType.ASSERT:
                    self._apply_assertion(instruction.expression, evaluator)
                case InstructionType.RETURN:
                    value = instruction.expression.value
                    return evaluator.evaluate(value) if value is not None else None
                case InstructionType.ASSUMPTION | InstructionType.NOP:
                    pass

            node = edge.successor

        return None

    @staticmethod
    def _select_edge(node : CFANode, evaluator : ExpressionEvaluator) -> CFAEdge:
        edges = node.leaving_edges
        if len(edges) == 1 and edges[0].instruction.kind != InstructionType.ASSUMPTION:
            return edges[0]

        # assumptions are side-effect free, see CFACreator._branch
        enabled = [
            e for e in edges
            if e.instruction.kind != InstructionType.ASSUMPTION or evaluator.evaluate(e.instruction.expression)
        ]
        assert len(enabled) == 1, (str(node), [str(e) for e in enabled])
        return enabled[0]

    @staticmethod
    def _apply_statement(statement : ast.stmt, evaluator : ExpressionEvaluator):
        match statement:
            case ast.Assign(targets=[ast.Name(id=name)], value=value):
                evaluator.valuation[name] = evaluator.evaluate(value)
            case ast.Expr(value=value):
                evaluator.evaluate(value)
            case ast.Break() | ast.Continue():
                # the edge already leads to the jump target
                pass
            case _:
                raise NotImplementedError("Statement %s is not supported!" % type(statement).__name__)

    @staticmethod
    def _apply_assertion(statement : ast.Assert, evaluator : ExpressionEvaluator):
        condition = evaluator.evaluate(statement.test)
        if not condition:
            if statement.msg is not None:
                message = evaluator.evaluate(statement.msg)
            else:
                message = 'assertion failed: %s' % ast.unparse(statement.test)
            check_assertion(condition, message)
