#!/usr/bin/env python

import ast

from pyloop.runtime import Trace


# name -> (delta, yields value before the update)
increment_builtins = {
    'postinc'   : (1, True),
    'postdec'   : (-1, True),
    'preinc'    : (1, False),
    'predec'    : (-1, False),
}

trace_builtin = 'print'

# markers that only have meaning as `with` headers, see LowerLoopMarkers
loop_markers = {'do_while', 'counted'}


def has_side_effects(expression : ast.AST) -> bool:
    """
    whether evaluating the expression may write a variable or the trace
    (conservatively every call and every assignment expression)
    """
    return any(isinstance(n, (ast.Call, ast.NamedExpr)) for n in ast.walk(expression))


class Valuation(dict):
    """
    Variable store of one function activation
    """

    def lookup(self, name : str):
        if name not in self:
            raise NameError("variable '%s' is not defined" % name)
        return self[name]

    def __str__(self):
        return "{%s}" % ",".join(
            ["->".join((k, str(v))) for (k, v) in self.items()]
        )


class ExpressionEvaluator(ast.NodeVisitor):
    """
    Concrete evaluation of expressions.
    Side effects (increment builtins, :=, print, calls) are applied to the
    given valuation and trace in evaluation order.
    """

    def __init__(self, valuation : Valuation, trace : Trace | None = None, call_function=None):
        self.valuation = valuation
        self.trace = trace
        self.call_function = call_function
        self.rstack = list()

    def _push_rvalue(self, rvalue):
        self.rstack.append(rvalue)

    def _pop_rvalue(self):
        assert len(self.rstack) > 0
        return self.rstack.pop()

    def evaluate(self, node : ast.AST):
        self.visit(node)
        return self._pop_rvalue()

    def generic_visit(self, node):
        raise NotImplementedError("Expression %s is not supported!" % type(node).__name__)

    def visit_Name(self, node):
        self._push_rvalue(self.valuation.lookup(node.id))

    def visit_Constant(self, node):
        self._push_rvalue(node.value)

    def visit_NamedExpr(self, node):
        value = self.evaluate(node.value)
        self.valuation[node.target.id] = value
        self._push_rvalue(value)

    def visit_UnaryOp(self, node):
        operand = self.evaluate(node.operand)
        match node.op:
            case ast.Not():
                result = not operand
            case ast.USub():
                result = -operand
            case ast.UAdd():
                result = +operand
            case ast.Invert():
                result = ~operand
            case _:
                raise NotImplementedError("Operator %s is not implemented!" % node.op)
        self._push_rvalue(result)

    def visit_BoolOp(self, node):
        # short-circuit, the operands behind the deciding one are not evaluated
        result = None
        for value in node.values:
            result = self.evaluate(value)
            match node.op:
                case ast.And() if not result:
                    break
                case ast.Or() if result:
                    break
        self._push_rvalue(result)

    def visit_IfExp(self, node):
        if self.evaluate(node.test):
            self.visit(node.body)
        else:
            self.visit(node.orelse)

    def visit_Compare(self, node):
        left = self.evaluate(node.left)
        result = True
        for op, comparator in zip(node.ops, node.comparators):
            right = self.evaluate(comparator)
            if not self._compare(op, left, right):
                result = False
                break
            left = right
        self._push_rvalue(result)

    @staticmethod
    def _compare(op, left, right) -> bool:
        match op:
            case ast.Eq():
                return left == right
            case ast.NotEq():
                return left != right
            case ast.Lt():
                return left < right
            case ast.LtE():
                return left <= right
            case ast.Gt():
                return left > right
            case ast.GtE():
                return left >= right
            case _:
                raise NotImplementedError("Operator %s is not implemented!" % op)

    def visit_BinOp(self, node):
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        match node.op:
            case ast.Add():
                result = left + right
            case ast.Sub():
                result = left - right
            case ast.Mult():
                result = left * right
            case ast.Div():
                result = left / right
            case ast.FloorDiv():
                result = left // right
            case ast.Mod():
                result = left % right
            case ast.Pow():
                result = left ** right
            case ast.LShift():
                result = left << right
            case ast.RShift():
                result = left >> right
            case ast.BitOr():
                result = left | right
            case ast.BitXor():
                result = left ^ right
            case ast.BitAnd():
                result = left & right
            case _:
                raise NotImplementedError("Operator %s is not implemented!" % node.op)

        self._push_rvalue(result)

    def visit_Call(self, node):
        assert isinstance(node.func, ast.Name), node.func
        name = node.func.id

        if name in increment_builtins:
            self._increment(node, *increment_builtins[name])
            return

        args = [self.evaluate(a) for a in node.args]
        if name == trace_builtin:
            assert self.trace is not None, 'print without trace'
            self.trace.emit(*args)
            self._push_rvalue(None)
        elif self.call_function is not None:
            self._push_rvalue(self.call_function(name, args))
        else:
            raise NameError("function '%s' is not defined" % name)

    def _increment(self, node : ast.Call, delta : int, yields_old : bool):
        # exactly one read and one write of the counter per evaluation
        target = node.args[0]
        assert isinstance(target, ast.Name), target
        old = self.valuation.lookup(target.id)
        new = old + delta
        self.valuation[target.id] = new
        self._push_rvalue(old if yields_old else new)
