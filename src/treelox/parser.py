from typing import Callable

import treelox.expr as ex
from treelox import stmt as st
from treelox.diagnostics import Diagnostics
from treelox.tokens import Token, TokenType as TT, TokenGroup as TG

MAX_ARGUMENTS = 255


class ParseError(Exception):
    pass


class Parser:
    """Recursive-descent parser producing statements or a single expression.

    Syntax errors are reported to ``diagnostics`` as they are found. The
    parser then skips to the next statement boundary and keeps going, so a
    single pass reports every independent error in the source.
    """

    def __init__(self, tokens: list[Token], diagnostics: Diagnostics) -> None:
        self.tokens = tokens
        self.diagnostics = diagnostics
        self.current = 0

    def parse(self) -> list[st.Stmt]:
        statements: list[st.Stmt] = []
        while not self.at_end():
            decl = self.declaration()
            if decl is not None:
                statements.append(decl)

        return statements

    def parse_expression(self) -> ex.Expr | None:
        try:
            expr = self.expression()
            if not self.at_end():
                raise self.error(self.peek(), "Expected end of expression.")
            return expr
        except ParseError:
            return None

    def declaration(self) -> st.Stmt | None:
        try:
            if self.match(TT.CLASS):
                return self.class_declaration()
            if self.match(TT.FUN):
                return self.function("function")
            if self.match(TT.VAR):
                return self.var_declaration()

            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self) -> st.Class:
        name = self.consume(TT.IDENTIFIER, "Expected class name.")

        superclass = None
        if self.match(TT.LESS):
            self.consume(TT.IDENTIFIER, "Expected superclass name.")
            superclass = ex.Variable(self.previous())

        self.consume(TT.LEFT_BRACE, "Expected '{' before class body.")

        methods: list[st.Function] = []
        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            methods.append(self.function("method"))

        self.consume(TT.RIGHT_BRACE, "Expected '}' after class body.")

        return st.Class(name, superclass, methods)

    def var_declaration(self) -> st.Var:
        name = self.consume(TT.IDENTIFIER, "Expected variable name.")

        initializer = None
        if self.match(TT.EQUAL):
            initializer = self.expression()

        self.consume(TT.SEMICOLON, "Expected ';' after variable declaration.")
        return st.Var(name, initializer)

    def statement(self) -> st.Stmt:
        if self.match(TT.FOR):
            return self.for_statement()
        if self.match(TT.IF):
            return self.if_statement()
        if self.match(TT.PRINT):
            return self.print_statement()
        if self.match(TT.RETURN):
            return self.return_statement()
        if self.match(TT.WHILE):
            return self.while_statement()
        if self.match(TT.LEFT_BRACE):
            return st.Block(self.block())

        return self.expression_statement()

    def for_statement(self) -> st.Stmt:
        self.consume(TT.LEFT_PAREN, "Expected '(' after 'for'.")

        initializer: st.Stmt | None
        if self.match(TT.SEMICOLON):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TT.SEMICOLON):
            condition = self.expression()

        self.consume(TT.SEMICOLON, "Expected ';' after loop condition.")

        increment = None
        if not self.check(TT.RIGHT_PAREN):
            increment = self.expression()

        self.consume(TT.RIGHT_PAREN, "Expected ')' after for clauses.")

        body = self.statement()

        # Desugar into a while loop; the initializer's variable is shared by
        # every iteration.
        if increment is not None:
            body = st.Block([body, st.Expression(increment)])

        if condition is None:
            condition = ex.Literal(True)
        body = st.While(condition, body)

        if initializer is not None:
            body = st.Block([initializer, body])

        return body

    def if_statement(self) -> st.If:
        self.consume(TT.LEFT_PAREN, "Expected '(' after 'if'.")
        condition = self.expression()
        self.consume(TT.RIGHT_PAREN, "Expected ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.statement()

        return st.If(condition, then_branch, else_branch)

    def print_statement(self) -> st.Print:
        value = self.expression()
        self.consume(TT.SEMICOLON, "Expected ';' after value.")
        return st.Print(value)

    def return_statement(self) -> st.Return:
        keyword = self.previous()
        value: ex.Expr | None = None
        if not self.check(TT.SEMICOLON):
            value = self.expression()

        self.consume(TT.SEMICOLON, "Expected ';' after return value.")
        return st.Return(keyword, value)

    def while_statement(self) -> st.While:
        self.consume(TT.LEFT_PAREN, "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume(TT.RIGHT_PAREN, "Expected ')' after condition.")
        body = self.statement()

        return st.While(condition, body)

    def expression_statement(self) -> st.Expression:
        expr = self.expression()
        self.consume(TT.SEMICOLON, "Expected ';' after expression.")
        return st.Expression(expr)

    def function(self, kind: str) -> st.Function:
        name = self.consume(TT.IDENTIFIER, f"Expected {kind} name.")

        self.consume(TT.LEFT_PAREN, f"Expected '(' after {kind} name.")
        parameters: list[Token] = []

        if not self.check(TT.RIGHT_PAREN):
            while True:
                if len(parameters) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")

                parameters.append(self.consume(TT.IDENTIFIER, "Expected parameter name."))

                if not self.match(TT.COMMA):
                    break

        self.consume(TT.RIGHT_PAREN, "Expected ')' after parameters.")

        self.consume(TT.LEFT_BRACE, f"Expected '{{' before {kind} body.")
        body = self.block()
        return st.Function(name, parameters, body)

    def block(self) -> list[st.Stmt]:
        statements: list[st.Stmt] = []

        while not self.check(TT.RIGHT_BRACE) and not self.at_end():
            decl = self.declaration()
            if decl is not None:
                statements.append(decl)

        self.consume(TT.RIGHT_BRACE, "Expected '}' after block.")
        return statements

    def expression(self) -> ex.Expr:
        return self.assignment()

    def assignment(self) -> ex.Expr:
        expr = self.logical_or()

        if self.match(TT.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ex.Variable):
                return ex.Assign(expr.name, value)
            elif isinstance(expr, ex.Get):
                return ex.Set(expr.object, expr.name, value)

            # Reported but not raised, the parser is not confused.
            self.error(equals, "Invalid assignment target.")

        return expr

    def logical_or(self) -> ex.Expr:
        return self.handle_left_binary(self.logical_and, TT.OR, expr_type=ex.Logical)

    def logical_and(self) -> ex.Expr:
        return self.handle_left_binary(self.equality, TT.AND, expr_type=ex.Logical)

    def equality(self) -> ex.Expr:
        return self.handle_left_binary(self.comparison, *TG.Equality)

    def comparison(self) -> ex.Expr:
        return self.handle_left_binary(self.term, *TG.Comparison)

    def term(self) -> ex.Expr:
        return self.handle_left_binary(self.factor, *TG.Term)

    def factor(self) -> ex.Expr:
        return self.handle_left_binary(self.unary, *TG.Factor)

    def unary(self) -> ex.Expr:
        if self.match(TT.BANG, TT.MINUS):
            operator = self.previous()
            right = self.unary()
            return ex.Unary(operator, right)

        return self.call()

    def call(self) -> ex.Expr:
        expr = self.primary()

        while True:
            if self.match(TT.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TT.DOT):
                name = self.consume(TT.IDENTIFIER, "Expected property name after '.'.")
                expr = ex.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee: ex.Expr) -> ex.Expr:
        arguments: list[ex.Expr] = []

        if not self.check(TT.RIGHT_PAREN):
            arguments.append(self.expression())
            while self.match(TT.COMMA):
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())

        paren = self.consume(TT.RIGHT_PAREN, "Expected ')' after arguments.")

        return ex.Call(callee, paren, arguments)

    def primary(self) -> ex.Expr:
        if self.match(TT.FALSE):
            return ex.Literal(False)
        elif self.match(TT.TRUE):
            return ex.Literal(True)
        elif self.match(TT.NIL):
            return ex.Literal(None)

        if self.match(TT.NUMBER, TT.STRING):
            return ex.Literal(self.previous().literal)

        if self.match(TT.SUPER):
            keyword = self.previous()
            self.consume(TT.DOT, "Expected '.' after 'super'.")
            method = self.consume(TT.IDENTIFIER, "Expected superclass method name.")
            return ex.Super(keyword, method)

        if self.match(TT.THIS):
            return ex.This(self.previous())

        if self.match(TT.IDENTIFIER):
            return ex.Variable(self.previous())

        if self.match(TT.LEFT_PAREN):
            expr = self.expression()
            self.consume(TT.RIGHT_PAREN, "Expected ')' after expression.")
            return ex.Grouping(expr)

        raise self.error(self.peek(), "Expected expression.")

    def handle_left_binary(
            self,
            matcher: Callable[[], ex.Expr],
            *token_list: TT,
            expr_type: type = ex.Binary
            ) -> ex.Expr:
        expr = matcher()

        while self.match(*token_list):
            operator = self.previous()
            right = matcher()
            expr = expr_type(expr, operator, right)

        return expr

    def match(self, *types: TT) -> bool:
        for type in types:
            if self.check(type):
                self.advance()
                return True

        return False

    def consume(self, type: TT, message: str) -> Token:
        if self.check(type):
            return self.advance()

        raise self.error(self.peek(), message)

    def check(self, type: TT) -> bool:
        if self.at_end():
            return False

        return self.peek().type == type

    def advance(self) -> Token:
        if not self.at_end():
            self.current += 1

        return self.previous()

    def at_end(self) -> bool:
        return self.peek().type == TT.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def error(self, token: Token, message: str) -> ParseError:
        self.diagnostics.error(token, message)
        return ParseError()

    def synchronize(self) -> None:
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMICOLON:
                return

            if self.peek().type in TG.Statement:
                return

            self.advance()
