from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Self, TYPE_CHECKING

from treelox.errors import LoxRuntimeError
from treelox.tokens import Token

if TYPE_CHECKING:
    from treelox import function as fn
    from treelox import interpreter as interp


class LoxInstance:
    klass: 'LoxClass'
    fields: dict[str, Any]

    def __init__(self, klass: 'LoxClass') -> None:
        self.klass = klass
        self.fields = {}

    def __str__(self) -> str:
        return f"{self.klass.name} instance"

    def get(self, name: Token) -> Any:
        # Fields shadow methods of the same name.
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value


class LoxClass:
    name: str
    superclass: Self | None
    methods: Mapping[str, 'fn.LoxFunction']

    def __init__(
        self, name: str, superclass: Self | None, methods: Mapping[str, 'fn.LoxFunction']
    ) -> None:
        self.name = name
        self.superclass = superclass
        self.methods = MappingProxyType(dict(methods))

    def __str__(self) -> str:
        return self.name

    def call(self, interpreter: 'interp.Interpreter', arguments: list[Any]) -> Any:
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is not None:
            return initializer.arity()
        return 0

    def find_method(self, name: str) -> 'fn.LoxFunction | None':
        method = self.methods.get(name)
        if method is None and self.superclass is not None:
            return self.superclass.find_method(name)
        return method
