from contextlib import contextmanager
from enum import Enum, auto
from functools import singledispatchmethod
from typing import Final, Iterator, override

from treelox.diagnostics import Diagnostics
from treelox.tokens import Token
from treelox.visitor import Visitable, Visitor
from treelox import interpreter as interp, stmt as st, expr as ex

class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()

class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()

class VariableState(Enum):
    DECLARED = auto()
    DEFINED = auto()

class Variable:
    name: Final[Token]
    state: VariableState

    def __init__(self, name: Token, state: VariableState) -> None:
        self.name = name
        self.state = state

class Resolver(Visitor[None]):
    """Static pass computing the scope distance of every local reference.

    Globals are never pushed as a scope: a name not found in ``scopes`` is
    left unresolved and looked up dynamically at runtime.
    """

    interpreter: interp.Interpreter
    diagnostics: Diagnostics
    scopes: list[dict[str, Variable]]
    current_function: FunctionType
    current_class: ClassType

    def __init__(self, interpreter: interp.Interpreter, diagnostics: Diagnostics) -> None:
        self.interpreter = interpreter
        self.diagnostics = diagnostics
        self.scopes = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, node: list[st.Stmt] | st.Stmt | ex.Expr) -> None:
        match node:
            case list(statements):
                for statement in statements:
                    self.resolve(statement)
            case st.Stmt() | ex.Expr():
                node.accept(self)
            case _:
                raise NotImplementedError(f"'{node.__class__.__name__}' could not be handled by resolve()")

    @contextmanager
    def scope(self, *bound: str, name: Token | None = None) -> Iterator[dict[str, Variable]]:
        content: dict[str, Variable] = {}
        for keyword in bound:
            content[keyword] = Variable(name, VariableState.DEFINED)

        self.scopes.append(content)
        try:
            yield content
        finally:
            self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.diagnostics.error(name, "Already a variable with this name in this scope.")

        scope[name.lexeme] = Variable(name, VariableState.DECLARED)

    def define(self, name: Token) -> None:
        if self.scopes:
            self.scopes[-1][name.lexeme].state = VariableState.DEFINED

    def resolve_local(self, expr: ex.Expr, name: Token) -> None:
        for i, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, i)
                return

    def resolve_function(self, function: st.Function, type: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = type

        with self.scope():
            for param in function.params:
                self.declare(param)
                self.define(param)
            self.resolve(function.body)

        self.current_function = enclosing_function

    @singledispatchmethod
    @override
    def visit(self, obj: Visitable) -> None:
        raise self.unhandled(obj)

    @visit.register
    def _(self, stmt: st.Block) -> None:
        with self.scope():
            self.resolve(stmt.statements)

    @visit.register
    def _(self, stmt: st.Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.diagnostics.error(stmt.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self.resolve(stmt.superclass)
            self.resolve_methods(stmt, "super", "this")
        else:
            self.resolve_methods(stmt, "this")

        self.current_class = enclosing_class

    def resolve_methods(self, stmt: st.Class, *keywords: str) -> None:
        # One scope per keyword, outermost first, mirroring the runtime
        # environments that bind 'super' and then 'this'.
        if keywords:
            outer, *inner = keywords
            with self.scope(outer, name=stmt.name):
                self.resolve_methods(stmt, *inner)
            return

        for method in stmt.methods:
            declaration = FunctionType.METHOD
            if method.name.lexeme == "init":
                declaration = FunctionType.INITIALIZER
            self.resolve_function(method, declaration)

    @visit.register
    def _(self, stmt: st.Expression) -> None:
        self.resolve(stmt.expression)

    @visit.register
    def _(self, stmt: st.Function) -> None:
        self.declare(stmt.name)
        self.define(stmt.name)

        self.resolve_function(stmt, FunctionType.FUNCTION)

    @visit.register
    def _(self, stmt: st.If) -> None:
        self.resolve(stmt.condition)
        self.resolve(stmt.then_branch)

        if stmt.else_branch is not None:
            self.resolve(stmt.else_branch)

    @visit.register
    def _(self, stmt: st.Print) -> None:
        self.resolve(stmt.expression)

    @visit.register
    def _(self, stmt: st.Return) -> None:
        if self.current_function is FunctionType.NONE:
            self.diagnostics.error(stmt.keyword, "Can't return from top-level code.")

        if stmt.value is not None:
            if self.current_function is FunctionType.INITIALIZER:
                self.diagnostics.error(stmt.keyword, "Can't return a value from an initializer.")
            self.resolve(stmt.value)

    @visit.register
    def _(self, stmt: st.Var) -> None:
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self.resolve(stmt.initializer)
        self.define(stmt.name)

    @visit.register
    def _(self, stmt: st.While) -> None:
        self.resolve(stmt.condition)
        self.resolve(stmt.body)

    @visit.register
    def _(self, expr: ex.Assign) -> None:
        self.resolve(expr.value)
        self.resolve_local(expr, expr.name)

    @visit.register
    def _(self, expr: ex.Binary) -> None:
        self.resolve(expr.left)
        self.resolve(expr.right)

    @visit.register
    def _(self, expr: ex.Call) -> None:
        self.resolve(expr.callee)

        for argument in expr.arguments:
            self.resolve(argument)

    @visit.register
    def _(self, expr: ex.Get) -> None:
        self.resolve(expr.object)

    @visit.register
    def _(self, expr: ex.Grouping) -> None:
        self.resolve(expr.expression)

    @visit.register
    def _(self, expr: ex.Literal) -> None:
        pass

    @visit.register
    def _(self, expr: ex.Logical) -> None:
        self.resolve(expr.left)
        self.resolve(expr.right)

    @visit.register
    def _(self, expr: ex.Set) -> None:
        self.resolve(expr.value)
        self.resolve(expr.object)

    @visit.register
    def _(self, expr: ex.Super) -> None:
        if self.current_class is ClassType.NONE:
            self.diagnostics.error(expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class is not ClassType.SUBCLASS:
            self.diagnostics.error(expr.keyword, "Can't use 'super' in a class with no superclass.")

        self.resolve_local(expr, expr.keyword)

    @visit.register
    def _(self, expr: ex.This) -> None:
        if self.current_class is ClassType.NONE:
            self.diagnostics.error(expr.keyword, "Can't use 'this' outside of a class.")
            return

        self.resolve_local(expr, expr.keyword)

    @visit.register
    def _(self, expr: ex.Unary) -> None:
        self.resolve(expr.right)

    @visit.register
    def _(self, expr: ex.Variable) -> None:
        if self.scopes:
            var = self.scopes[-1].get(expr.name.lexeme)
            if var is not None and var.state is VariableState.DECLARED:
                self.diagnostics.error(expr.name,
                                       "Can't read local variable in its own initializer.")

        self.resolve_local(expr, expr.name)
