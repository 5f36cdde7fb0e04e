from collections.abc import Iterator
from typing import Any, Self

from treelox.errors import LoxRuntimeError
from treelox.tokens import Token


class Environment:
    """One lexical scope. ``enclosing`` is fixed at creation, so chains never cycle."""

    values: dict[str, Any]
    enclosing: Self | None

    def __init__(self, enclosing: Self | None = None) -> None:
        self.values = {}
        self.enclosing = enclosing

    def chain(self) -> Iterator[Self]:
        """Yield this scope and then each enclosing one out to the globals."""
        scope: Self | None = self
        while scope is not None:
            yield scope
            scope = scope.enclosing

    def owner(self, name: Token) -> dict[str, Any]:
        for scope in self.chain():
            if name.lexeme in scope.values:
                return scope.values

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> Self:
        for hops, scope in enumerate(self.chain()):
            if hops == distance:
                return scope

        raise ValueError(f"Invalid scope distance {distance}")

    def define(self, name: str, value: Any) -> None:
        self.values[name] = value

    def get(self, name: Token) -> Any:
        return self.owner(name)[name.lexeme]

    def assign(self, name: Token, value: Any) -> None:
        self.owner(name)[name.lexeme] = value

    def get_at(self, distance: int, name: str) -> Any:
        try:
            return self.ancestor(distance).values[name]
        except KeyError:
            raise KeyError(f"'{name}' is not bound {distance} scopes up") from None

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value
