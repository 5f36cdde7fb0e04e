import sys
from typing import TextIO, TYPE_CHECKING

from treelox.tokens import Token, TokenType as TT

if TYPE_CHECKING:
    from treelox.errors import LoxRuntimeError


class Diagnostics:
    """Collects scan, parse, resolve and runtime errors for one driver.

    Reporting never raises; callers inspect ``had_error`` and
    ``had_runtime_error`` after each phase to decide whether to continue.
    """

    messages: list[str]

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream
        self.messages = []
        self.had_error = False
        self.had_runtime_error = False

    def reset(self) -> None:
        self.messages.clear()
        self.had_error = False
        self.had_runtime_error = False

    def error(self, where: int | Token, message: str) -> None:
        if isinstance(where, int):
            self.report(where, "", message)
        elif where.type == TT.EOF:
            self.report(where.line, " at end", message)
        else:
            self.report(where.line, f" at '{where.lexeme}'", message)

    def runtime_error(self, error: 'LoxRuntimeError') -> None:
        if error.token is not None:
            self.emit(f"{error}\n[line {error.token.line}]")
        else:
            self.emit(str(error))
        self.had_runtime_error = True

    def report(self, line: int, where: str, message: str) -> None:
        self.emit(f"[line {line}] Error{where}: {message}")
        self.had_error = True

    def emit(self, text: str) -> None:
        self.messages.append(text)
        print(text, file=self.stream if self.stream is not None else sys.stderr)
