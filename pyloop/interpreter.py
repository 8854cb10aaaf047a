#!/usr/bin/env python

from enum import Enum
from typing import List, Optional

import ast

from pyloop.ast.nodes import DoWhile, CFor
from pyloop.preprocessor import prepare_ast
from pyloop.runtime import Trace, IterationLimitReached, check_assertion
from pyloop.values import Valuation, ExpressionEvaluator, increment_builtins

from pyloop import log


class Signal(Enum):
    """
    Outcome of executing a statement. BREAK and CONTINUE are consumed by the
    innermost loop, RETURN passes through every loop of the activation.
    """
    NORMAL = 0
    BREAK = 1
    CONTINUE = 2
    RETURN = 3


class LoopForm(Enum):
    POST_CONDITION = 1
    PRE_CONDITION = 2
    COUNTED = 3

    @staticmethod
    def of(node : ast.stmt) -> 'LoopForm':
        match node:
            case DoWhile():
                return LoopForm.POST_CONDITION
            case ast.While():
                return LoopForm.PRE_CONDITION
            case CFor():
                return LoopForm.COUNTED
            case _:
                raise ValueError('not a loop: %s' % type(node).__name__)

    def __str__(self):
        return self.name.lower().replace('_', '-')


class LoopFrame:
    """
    One live activation of a loop construct (Loop Instance)
    """

    def __init__(self, node : ast.stmt, depth : int):
        self.form = LoopForm.of(node)
        self.node = node
        self.depth = depth
        self.iterations = 0
        self.counter = LoopFrame.counter_of(node)

    @staticmethod
    def counter_of(node) -> Optional[str]:
        """
        the loop-local counter: the variable declared by a counted loop,
        else the variable the test increments
        """
        if isinstance(node, CFor) and node.init:
            return node.init[0].targets[0].id
        if node.test is None:
            return None
        for n in ast.walk(node.test):
            if isinstance(n, ast.Call) and isinstance(n.func, ast.Name) and n.func.id in increment_builtins:
                return n.args[0].id
        return None

    def __str__(self):
        return '%s loop at line %s (depth %d, counter %s)' % (
            self.form, getattr(self.node, 'lineno', '?'), self.depth, self.counter
        )


class NestingContext:
    """
    Stack of the active loop frames of one function activation.
    A control signal always targets the innermost frame.
    """

    def __init__(self):
        self.frames : List[LoopFrame] = list()

    def enter(self, node : ast.stmt) -> LoopFrame:
        frame = LoopFrame(node, len(self.frames))
        self.frames.append(frame)
        return frame

    def leave(self, frame : LoopFrame):
        assert len(self.frames) > 0 and self.frames[-1] is frame, (frame, self.frames)
        self.frames.pop()

    def innermost(self) -> Optional[LoopFrame]:
        return self.frames[-1] if len(self.frames) > 0 else None

    def depth(self) -> int:
        return len(self.frames)


def make_loop(form : LoopForm, test, body, init=(), update=None) -> ast.stmt:
    match form:
        case LoopForm.POST_CONDITION:
            return DoWhile(body=list(body), test=test if test is not None else ast.Constant(True))
        case LoopForm.PRE_CONDITION:
            return ast.While(test=test if test is not None else ast.Constant(True), body=list(body), orelse=[])
        case LoopForm.COUNTED:
            return CFor(init=list(init), test=test, update=update, body=list(body))


def _expression(expression) -> Optional[ast.expr]:
    if isinstance(expression, str):
        return ast.parse(expression, mode='eval').body
    return expression

def _statements(statements) -> List[ast.stmt]:
    if isinstance(statements, str):
        return ast.parse(statements).body
    return list(statements)


class LoopInterpreter(ast.NodeVisitor):
    """
    Tree-walking execution of preprocessed programs.

    Every statement visitor returns a Signal. A block stops at the first
    statement that does not complete normally and hands the signal to its
    enclosing construct; the loop visitors consume BREAK and CONTINUE
    according to their form:

    post-condition  body; on BREAK leave without testing, otherwise test (with
                    its side effects) and repeat while it holds
    pre-condition   test before every body entry; BREAK leaves, CONTINUE re-tests
    counted         init once per entry; test (None counts as true); body;
                    BREAK leaves without the update, CONTINUE runs the update
    """

    def __init__(self, tree : Optional[ast.Module] = None, trace : Optional[Trace] = None, max_iterations : Optional[int] = None):
        self.tree = tree
        self.trace = trace if trace is not None else Trace()
        self.max_iterations = max_iterations
        self.iterations = 0
        self.functions = {
            n.name : n for n in (tree.body if tree is not None else []) if isinstance(n, ast.FunctionDef)
        }

        # state of the current activation
        self.valuation = Valuation()
        self.context = NestingContext()
        self.return_value = None

    # entry points --------------------------------------------------

    def run_program(self):
        """ runs main() if defined, the module-level statements otherwise """
        assert self.tree is not None
        if 'main' in self.functions:
            return self.call('main')
        statements = [s for s in self.tree.body if not isinstance(s, ast.FunctionDef)]
        return self._activate(Valuation(), statements)

    def call(self, name : str, *args):
        if name not in self.functions:
            raise NameError("function '%s' is not defined" % name)
        declaration = self.functions[name]
        params = [a.arg for a in declaration.args.args]
        if len(params) != len(args):
            raise TypeError('%s() takes %d arguments (%d given)' % (name, len(params), len(args)))
        return self._activate(Valuation(zip(params, args)), declaration.body)

    def run(self, form : LoopForm, test, body, init=(), update=None, valuation : Optional[Valuation] = None) -> Valuation:
        """
        Executes a single loop of the given form and returns the final variable state.
        test, update and body are source text or ast nodes, init is a list of
        assignments or their source text.
        """
        loop = make_loop(form, _expression(test), _statements(body), _statements(init), _expression(update))
        tree = prepare_ast(ast.Module(body=[loop], type_ignores=[]))
        valuation = valuation if valuation is not None else Valuation()
        self._activate(valuation, tree.body)

        # counters declared by counted loops end with their Loop Instance
        for loop in ast.walk(tree):
            if isinstance(loop, CFor):
                for assign in loop.init:
                    valuation.pop(assign.targets[0].id, None)
        return valuation

    # helpers -------------------------------------------------------

    def _activate(self, valuation : Valuation, body : List[ast.stmt]):
        saved = (self.valuation, self.context, self.return_value)
        self.valuation, self.context, self.return_value = valuation, NestingContext(), None
        try:
            self.execute_block(body)
            return self.return_value
        finally:
            self.valuation, self.context, self.return_value = saved

    def _call_function(self, name, args):
        return self.call(name, *args)

    def evaluate(self, expression : ast.expr):
        return ExpressionEvaluator(self.valuation, self.trace, self._call_function).evaluate(expression)

    def execute_block(self, statements : List[ast.stmt]) -> Signal:
        for statement in statements:
            signal = self.visit(statement)
            if signal is not Signal.NORMAL:
                return signal
        return Signal.NORMAL

    def generic_visit(self, node):
        raise NotImplementedError("Statement %s is not supported!" % type(node).__name__)

    # loops ---------------------------------------------------------

    def _iterate(self, frame : LoopFrame) -> Signal:
        frame.iterations += 1
        self.iterations += 1
        if self.max_iterations is not None and self.iterations > self.max_iterations:
            raise IterationLimitReached(self.max_iterations)
        return self.execute_block(frame.node.body)

    def _test(self, frame : LoopFrame) -> bool:
        result = self.evaluate(frame.node.test)
        log.printer.log_debug(3, '[LoopInterpreter] test of', frame, '->', result, self.valuation)
        return bool(result)

    def _enter(self, node) -> LoopFrame:
        frame = self.context.enter(node)
        log.printer.log_debug(2, '[LoopInterpreter] enter', frame)
        return frame

    def _leave(self, frame : LoopFrame):
        log.printer.log_debug(2, '[LoopInterpreter] leave', frame, 'after', frame.iterations, 'iterations')
        self.context.leave(frame)

    def visit_DoWhile(self, node : DoWhile) -> Signal:
        frame = self._enter(node)
        try:
            while True:
                signal = self._iterate(frame)
                if signal is Signal.BREAK:
                    break
                if signal is Signal.RETURN:
                    return signal
                # the test runs after normal completion and after continue
                if not self._test(frame):
                    break
        finally:
            self._leave(frame)
        return Signal.NORMAL

    def visit_While(self, node : ast.While) -> Signal:
        frame = self._enter(node)
        try:
            while self._test(frame):
                signal = self._iterate(frame)
                if signal is Signal.BREAK:
                    break
                if signal is Signal.RETURN:
                    return signal
        finally:
            self._leave(frame)
        return Signal.NORMAL

    def visit_CFor(self, node : CFor) -> Signal:
        frame = self._enter(node)
        try:
            for assign in node.init:
                self.visit(assign)
            while node.test is None or self._test(frame):
                signal = self._iterate(frame)
                if signal is Signal.BREAK:
                    # update is skipped
                    break
                if signal is Signal.RETURN:
                    return signal
                if node.update is not None:
                    self.evaluate(node.update)
        finally:
            self._leave(frame)
        return Signal.NORMAL

    # other statements ----------------------------------------------

    def visit_Break(self, node) -> Signal:
        return Signal.BREAK

    def visit_Continue(self, node) -> Signal:
        return Signal.CONTINUE

    def visit_Return(self, node) -> Signal:
        self.return_value = self.evaluate(node.value) if node.value is not None else None
        return Signal.RETURN

    def visit_If(self, node) -> Signal:
        if self.evaluate(node.test):
            return self.execute_block(node.body)
        return self.execute_block(node.orelse)

    def visit_Assign(self, node) -> Signal:
        self.valuation[node.targets[0].id] = self.evaluate(node.value)
        return Signal.NORMAL

    def visit_Expr(self, node) -> Signal:
        self.evaluate(node.value)
        return Signal.NORMAL

    def visit_Assert(self, node) -> Signal:
        condition = self.evaluate(node.test)
        if not condition:
            message = self.evaluate(node.msg) if node.msg is not None else 'assertion failed: %s' % ast.unparse(node.test)
            check_assertion(condition, message)
        return Signal.NORMAL

    def visit_Pass(self, node) -> Signal:
        return Signal.NORMAL
