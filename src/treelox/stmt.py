from dataclasses import dataclass

from treelox import expr as ex
from treelox.tokens import Token
from treelox.visitor import Visitable

@dataclass(frozen=True, eq=False)
class Stmt(Visitable[None]):
    ...

@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: list[Stmt]

@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: list[Token]
    body: list[Stmt]

@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    superclass: ex.Variable | None
    methods: list[Function]

@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: ex.Expr

@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: ex.Expr
    then_branch: Stmt
    else_branch: Stmt | None = None

@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: ex.Expr

@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: ex.Expr | None = None

@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: ex.Expr | None = None

@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: ex.Expr
    body: Stmt
