from enum import Enum
from typing import Any


class TokenType(Enum):
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    SLASH = "/"
    STAR = "*"

    BANG = "!"
    BANG_EQUAL = "!="
    EQUAL = "="
    EQUAL_EQUAL = "=="
    GREATER = ">"
    GREATER_EQUAL = ">="
    LESS = "<"
    LESS_EQUAL = "<="

    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FUN = "fun"
    FOR = "for"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"

    EOF = "EOF"

KEYWORDS = {
    type.value: type for type in TokenType
    if type.value.isalpha() and type.value.islower()
}

# Integral numbers keep a ".0" suffix up to this size, larger ones use exponents.
PLAIN_INTEGRAL_LIMIT = 1e17


def format_number(num: float) -> str:
    if num.is_integer() and abs(num) < PLAIN_INTEGRAL_LIMIT:
        return f"{num:.1f}"
    return repr(num)

_TT = TokenType
class TokenGroup:
    Comparison = {_TT.GREATER, _TT.GREATER_EQUAL, _TT.LESS, _TT.LESS_EQUAL}
    Equality = {_TT.EQUAL_EQUAL, _TT.BANG_EQUAL}
    Factor = {_TT.STAR, _TT.SLASH}
    Term = {_TT.PLUS, _TT.MINUS}
    Statement = {
        _TT.CLASS,
        _TT.FUN,
        _TT.VAR,
        _TT.FOR,
        _TT.IF,
        _TT.WHILE,
        _TT.PRINT,
        _TT.RETURN,
    }

class Token:
    def __init__(
        self, type: TokenType, lexeme: str, line: int, literal: Any = None
    ) -> None:
        self.type = type
        self.lexeme = lexeme
        self.literal = literal
        self.line = line

    def __str__(self) -> str:
        match self.literal:
            case None:
                literal = "null"
            case float(num):
                literal = format_number(num)
            case _:
                literal = self.literal
        return f"{self.type.name} {self.lexeme} {literal}"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"
