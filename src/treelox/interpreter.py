from functools import singledispatchmethod
from typing import Any, Never, TextIO, override

from treelox.diagnostics import Diagnostics
from treelox.environment import Environment
from treelox.errors import LoxRuntimeError
import treelox.expr as ex
from treelox import function as fn
from treelox import loxclass as cl
from treelox import stmt as st
from treelox.tokens import Token, TokenType as TT, TokenGroup as TG, format_number
from treelox.visitor import Visitor, Visitable

__all__ = ["Interpreter", "LoxRuntimeError"]


class Interpreter(Visitor[Any]):
    globals: Environment
    environment: Environment
    locals: dict[ex.Expr, int]

    def __init__(self, diagnostics: Diagnostics | None = None, stdout: TextIO | None = None) -> None:
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.stdout = stdout
        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}

        self.register_native(fn.clock)

    def register_native(self, function: fn.NativeFunction, name: str | None = None) -> None:
        if name is None:
            name = function.name

        self.globals.define(name, function)

    def interpret(self, statements: list[st.Stmt]) -> None:
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            self.diagnostics.runtime_error(error)

    def interpret_expression(self, expr: ex.Expr) -> str | None:
        try:
            return self.stringify(self.evaluate(expr))
        except LoxRuntimeError as error:
            self.diagnostics.runtime_error(error)
            return None

    def resolve(self, expr: ex.Expr, depth: int) -> None:
        self.locals[expr] = depth

    @singledispatchmethod
    @override
    def visit(self, obj: Visitable) -> Any:
        raise self.unhandled(obj)

    @visit.register
    def _(self, expr: ex.Literal) -> Any:
        return expr.value

    @visit.register
    def _(self, expr: ex.Grouping) -> Any:
        return self.evaluate(expr.expression)

    @visit.register
    def _(self, expr: ex.Unary) -> Any:
        right = self.evaluate(expr.right)

        match expr.operator.type:
            case TT.BANG:
                return not self.is_truthy(right)
            case TT.MINUS:
                self.check_number_operands(expr.operator, right)
                return -right

            case _:
                raise ValueError(f"Unknown unary operator {expr.operator.lexeme!r}")

    @visit.register
    def _(self, expr: ex.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if expr.operator.type in TG.Factor | TG.Comparison | {TT.MINUS}:
            self.check_number_operands(expr.operator, left, right)

        match expr.operator.type:
            case TT.BANG_EQUAL:
                return not self.is_equal(left, right)
            case TT.EQUAL_EQUAL:
                return self.is_equal(left, right)
            case TT.GREATER:
                return left > right
            case TT.GREATER_EQUAL:
                return left >= right
            case TT.LESS:
                return left < right
            case TT.LESS_EQUAL:
                return left <= right
            case TT.MINUS:
                return left - right
            case TT.SLASH:
                if right == 0:
                    raise LoxRuntimeError(expr.operator, "Division by zero.")
                return left / right
            case TT.STAR:
                return left * right
            case TT.PLUS:
                if self.is_number(left) and self.is_number(right):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(expr.operator,
                                      "Operands must be two numbers or two strings.")
            case _:
                raise ValueError(f"Unknown binary operator {expr.operator.lexeme!r}")

    @visit.register
    def _(self, expr: ex.Logical) -> Any:
        left = self.evaluate(expr.left)

        if expr.operator.type == TT.OR:
            if self.is_truthy(left):
                return left
        else:
            if not self.is_truthy(left):
                return left

        return self.evaluate(expr.right)

    @visit.register
    def _(self, expr: ex.Variable) -> Any:
        return self.look_up_variable(expr.name, expr)

    @visit.register
    def _(self, expr: ex.Assign) -> Any:
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)

        return value

    @visit.register
    def _(self, expr: ex.Call) -> Any:
        callee = self.evaluate(expr.callee)

        arguments = []
        for argument in expr.arguments:
            arguments.append(self.evaluate(argument))

        if not isinstance(callee, fn.LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        function = callee

        if len(arguments) != function.arity():
            raise LoxRuntimeError(expr.paren,
            f"Expected {function.arity()} arguments but got {len(arguments)}.")

        try:
            return function.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    @visit.register
    def _(self, expr: ex.Get) -> Any:
        obj = self.evaluate(expr.object)
        if isinstance(obj, cl.LoxInstance):
            return obj.get(expr.name)

        raise LoxRuntimeError(expr.name, "Only instances have properties.")

    @visit.register
    def _(self, expr: ex.Set) -> Any:
        obj = self.evaluate(expr.object)
        if not isinstance(obj, cl.LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    @visit.register
    def _(self, expr: ex.This) -> Any:
        return self.look_up_variable(expr.keyword, expr)

    @visit.register
    def _(self, expr: ex.Super) -> Any:
        distance = self.locals[expr]
        superclass: cl.LoxClass = self.environment.get_at(distance, "super")
        # 'this' is always bound one scope inside 'super'.
        instance: cl.LoxInstance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    @visit.register
    def _(self, stmt: st.Expression) -> None:
        self.evaluate(stmt.expression)

    @visit.register
    def _(self, stmt: st.Function) -> None:
        function = fn.LoxFunction(stmt, self.environment)
        self.environment.define(stmt.name.lexeme, function)

    @visit.register
    def _(self, stmt: st.Class) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, cl.LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        closure = self.environment
        if superclass is not None:
            closure = Environment(self.environment)
            closure.define("super", superclass)

        methods: dict[str, fn.LoxFunction] = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == "init"
            methods[method.name.lexeme] = fn.LoxFunction(method, closure, is_initializer)

        klass = cl.LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    @visit.register
    def _(self, stmt: st.If) -> None:
        if self.is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            self.execute(stmt.else_branch)

    @visit.register
    def _(self, stmt: st.Print) -> None:
        value = self.evaluate(stmt.expression)
        print(self.stringify(value), file=self.stdout)

    @visit.register
    def _(self, stmt: st.Return) -> Never:
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)

        raise fn.Return(value)

    @visit.register
    def _(self, stmt: st.Var) -> None:
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.environment.define(stmt.name.lexeme, value)

    @visit.register
    def _(self, stmt: st.While) -> None:
        while self.is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.body)

    @visit.register
    def _(self, stmt: st.Block) -> None:
        self.execute_block(stmt.statements, Environment(self.environment))

    def look_up_variable(self, name: Token, expr: ex.Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def is_truthy(self, obj: Any) -> bool:
        return obj is not None and obj is not False

    def is_equal(self, left: Any, right: Any) -> bool:
        # No coercion: true != 1 even though Python says otherwise.
        if type(left) is not type(right):
            return False
        return left == right

    def evaluate(self, expr: ex.Expr) -> Any:
        return expr.accept(self)

    def execute(self, stmt: st.Stmt) -> None:
        stmt.accept(self)

    def execute_block(self, statements: list[st.Stmt], environment: Environment) -> None:
        previous = self.environment

        try:
            self.environment = environment

            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    @staticmethod
    def is_number(num: Any) -> bool:
        return isinstance(num, float)

    def check_number_operands(self, operator: Token, *operands: Any) -> None:
        if not all(map(self.is_number, operands)):
            if len(operands) > 1:
                raise LoxRuntimeError(operator, "Operands must be numbers.")
            raise LoxRuntimeError(operator, "Operand must be a number.")

    def stringify(self, obj: Any) -> str:
        match obj:
            case None:
                return "nil"
            case bool(b):
                return str(b).lower()
            case float(num):
                return format_number(num)
            case _:
                return str(obj)
