import re
from collections.abc import Iterator

from treelox.diagnostics import Diagnostics
from treelox.tokens import KEYWORDS, Token, TokenType as TT

# Alternatives are tried in order, so two-character operators precede their prefixes.
TOKEN_PATTERNS = [
    ("COMMENT", r"//[^\n]*"),
    ("STRING", r'"[^"]*"'),
    ("UNTERMINATED", r'"[^"]*\Z'),
    ("NUMBER", r"[0-9]+(?:\.[0-9]+)?"),
    ("WORD", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("OPERATOR", r"[!=<>]=|[(){},.\-+;*/!=<>]"),
    ("NEWLINE", r"\n"),
    ("SKIP", r"[ \r\t]+"),
    ("MISMATCH", r"."),
]

TOKEN_RE = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in TOKEN_PATTERNS))


class Scanner:
    """Turns source text into tokens with a single regular expression pass.

    Bad characters and unterminated strings are reported to ``diagnostics``
    and skipped, so one call always yields the whole token stream ending in EOF.
    """

    def __init__(self, source: str, diagnostics: Diagnostics) -> None:
        self.source = source
        self.diagnostics = diagnostics
        self.line = 1

    def scan_tokens(self) -> list[Token]:
        tokens = list(self.tokens())
        tokens.append(Token(TT.EOF, "", self.line))
        return tokens

    def tokens(self) -> Iterator[Token]:
        for found in TOKEN_RE.finditer(self.source):
            text = found.group()

            match found.lastgroup:
                case "NUMBER":
                    yield Token(TT.NUMBER, text, self.line, float(text))
                case "WORD":
                    yield Token(KEYWORDS.get(text, TT.IDENTIFIER), text, self.line)
                case "OPERATOR":
                    yield Token(TT(text), text, self.line)
                case "STRING":
                    # A string token carries the line it ends on.
                    self.line += text.count("\n")
                    yield Token(TT.STRING, text, self.line, text[1:-1])
                case "UNTERMINATED":
                    self.line += text.count("\n")
                    self.diagnostics.error(self.line, "Unterminated string.")
                case "NEWLINE":
                    self.line += 1
                case "MISMATCH":
                    self.diagnostics.error(self.line, f"Unexpected character: {text}")
