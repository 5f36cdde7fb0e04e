import logging
import os
import sys
from typing import Callable, TextIO

import treelox.expr as ex
from treelox import stmt as st
from treelox.ast_printer import AstPrinter
from treelox.diagnostics import Diagnostics
from treelox.interpreter import Interpreter
from treelox.parser import Parser
from treelox.resolver import Resolver
from treelox.scanner import Scanner
from treelox.tokens import Token

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

# Each Lox call costs several Python frames; deep recursion needs headroom.
RECURSION_LIMIT = 20000


class Lox:
    """Wires scanner, parser, resolver and interpreter for each execution mode.

    The interpreter, and with it the global environment, lives as long as the
    ``Lox`` object, so consecutive ``run`` calls share state like a REPL.
    """

    def __init__(self, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

        self.stdout = stdout
        self.diagnostics = Diagnostics(stderr)
        self.interpreter = Interpreter(self.diagnostics, stdout)

        self.modes: dict[str, Callable[[str], None]] = {
            "tokenize": self.tokenize,
            "parse": self.parse,
            "evaluate": self.evaluate,
            "run": self.run,
        }

    def run_file(self, path: str | os.PathLike, mode: str = "run") -> int:
        with open(path, "r", encoding="utf-8") as file:
            prog = file.read()

        self.modes[mode](prog)
        return self.exit_code()

    def run_prompt(self) -> None:
        try:
            while True:
                line = input("> ")
                self.run(line)
                self.diagnostics.reset()
        except EOFError:
            print("Bye.", file=self.stdout)

    def exit_code(self) -> int:
        if self.diagnostics.had_error:
            return EXIT_STATIC_ERROR
        if self.diagnostics.had_runtime_error:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK

    def scan(self, source: str) -> list[Token]:
        tokens = Scanner(source, self.diagnostics).scan_tokens()
        logger.debug("scanned %d tokens", len(tokens))
        return tokens

    def parse_expression(self, source: str) -> ex.Expr | None:
        tokens = self.scan(source)
        expr = Parser(tokens, self.diagnostics).parse_expression()
        if self.diagnostics.had_error:
            return None
        return expr

    def parse_program(self, source: str) -> list[st.Stmt] | None:
        tokens = self.scan(source)
        statements = Parser(tokens, self.diagnostics).parse()
        logger.debug("parsed %d statements", len(statements))
        if self.diagnostics.had_error:
            return None

        Resolver(self.interpreter, self.diagnostics).resolve(statements)
        if self.diagnostics.had_error:
            logger.debug("resolution failed, not executing")
            return None

        return statements

    def tokenize(self, source: str) -> None:
        for token in self.scan(source):
            print(token, file=self.stdout)

    def parse(self, source: str) -> None:
        expr = self.parse_expression(source)
        if expr is not None:
            print(AstPrinter().print(expr), file=self.stdout)

    def evaluate(self, source: str) -> None:
        expr = self.parse_expression(source)
        if expr is None:
            return

        Resolver(self.interpreter, self.diagnostics).resolve(expr)
        if self.diagnostics.had_error:
            return

        result = self.interpreter.interpret_expression(expr)
        if result is not None:
            print(result, file=self.stdout)

    def run(self, source: str) -> None:
        statements = self.parse_program(source)
        if statements is None:
            return

        self.interpreter.interpret(statements)
