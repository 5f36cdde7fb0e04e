from functools import singledispatchmethod
from typing import override

import treelox.expr as ex
from treelox.tokens import PLAIN_INTEGRAL_LIMIT
from treelox.visitor import Visitor, Visitable

class AstPrinter(Visitor[str]):
    """Renders expressions in fully parenthesized prefix form, e.g. ``(+ 1 (* 2 3))``."""

    def print(self, expr: ex.Expr) -> str:
        return expr.accept(self)

    @singledispatchmethod
    @override
    def visit(self, obj: Visitable) -> str:
        raise self.unhandled(obj)

    @visit.register
    def _(self, expr: ex.Assign) -> str:
        return self.parenthesize("=", expr.name.lexeme, expr.value)

    @visit.register
    def _(self, expr: ex.Binary) -> str:
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    @visit.register
    def _(self, expr: ex.Call) -> str:
        return self.parenthesize("call", expr.callee, *expr.arguments)

    @visit.register
    def _(self, expr: ex.Get) -> str:
        return self.parenthesize(".", expr.object, expr.name.lexeme)

    @visit.register
    def _(self, expr: ex.Grouping) -> str:
        return self.parenthesize("group", expr.expression)

    @visit.register
    def _(self, expr: ex.Literal) -> str:
        match expr.value:
            case None:
                return "nil"
            case bool(b):
                return str(b).lower()
            case float(num) if num.is_integer() and abs(num) < PLAIN_INTEGRAL_LIMIT:
                return f"{num:.0f}"
            case value:
                return str(value)

    @visit.register
    def _(self, expr: ex.Logical) -> str:
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    @visit.register
    def _(self, expr: ex.Set) -> str:
        target = self.parenthesize(".", expr.object, expr.name.lexeme)
        return self.parenthesize("=", target, expr.value)

    @visit.register
    def _(self, expr: ex.Super) -> str:
        return self.parenthesize("super", expr.method.lexeme)

    @visit.register
    def _(self, expr: ex.This) -> str:
        return "this"

    @visit.register
    def _(self, expr: ex.Unary) -> str:
        return self.parenthesize(expr.operator.lexeme, expr.right)

    @visit.register
    def _(self, expr: ex.Variable) -> str:
        return expr.name.lexeme

    def parenthesize(self, name: str, *parts: ex.Expr | str) -> str:
        content = " ".join(
            part if isinstance(part, str) else part.accept(self) for part in parts
        )

        return f"({name} {content})" if content else f"({name})"
