from abc import ABC, abstractmethod


class Visitor[T](ABC):
    """Consumer of the syntax tree; one ``visit`` overload per node type."""

    @abstractmethod
    def visit(self, visited: 'Visitable[T]') -> T:
        ...

    def unhandled(self, visited: 'Visitable[T]') -> NotImplementedError:
        return NotImplementedError(
            f"'{visited.__class__.__name__}' could not be dispatched by "
            f"{self.__class__.__name__}.visit()"
        )


class Visitable[T]:
    def accept(self, visitor: Visitor[T]) -> T:
        return visitor.visit(self)
