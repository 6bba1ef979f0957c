"""Recursive-descent parser producing the syntax tree, plus front-end helpers."""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from dslc import logger
from dslc.lexer import Token, TokenType, tokenize
from dslc.nodes import (
    BinaryExpr,
    BinaryOp,
    CallExpr,
    Expr,
    Function,
    LetStmt,
    LiteralExpr,
    Program,
    ReturnStmt,
    Stmt,
    Type,
    UnaryExpr,
    UnaryOp,
    VariableExpr,
)

__all__ = [
    "ParseError",
    "Parser",
    "parse_source",
    "read_file",
    "validate_ast",
    "format_ast",
    "dump_ast",
]


class ParseError(Exception):
    """Raised when the token stream does not follow the grammar."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


_TYPE_TOKENS: Mapping[TokenType, Type] = {
    TokenType.I32: Type.I32,
    TokenType.I64: Type.I64,
    TokenType.F32: Type.F32,
    TokenType.F64: Type.F64,
    TokenType.BOOL: Type.BOOL,
    TokenType.VOID: Type.VOID,
}

_EQUALITY_OPS = {TokenType.EQ: BinaryOp.EQ, TokenType.NE: BinaryOp.NE}
_COMPARISON_OPS = {
    TokenType.GT: BinaryOp.GT,
    TokenType.GE: BinaryOp.GE,
    TokenType.LT: BinaryOp.LT,
    TokenType.LE: BinaryOp.LE,
}
_TERM_OPS = {TokenType.PLUS: BinaryOp.ADD, TokenType.MINUS: BinaryOp.SUB}
_FACTOR_OPS = {
    TokenType.STAR: BinaryOp.MUL,
    TokenType.SLASH: BinaryOp.DIV,
    TokenType.MOD: BinaryOp.MOD,
}
_UNARY_OPS = {TokenType.MINUS: UnaryOp.NEG, TokenType.NOT: UnaryOp.NOT}


class Parser:
    """Builds a :class:`Program` from a token sequence ending in ``EOF``."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = list(tokens)
        if not self._tokens or self._tokens[-1].type is not TokenType.EOF:
            line = self._tokens[-1].line if self._tokens else 1
            self._tokens.append(Token(TokenType.EOF, "", line, 0))
        self._current = 0

    # Token cursor

    def _peek(self) -> Token:
        return self._tokens[min(self._current, len(self._tokens) - 1)]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _at_end(self) -> bool:
        return self._peek().type is TokenType.EOF

    def _advance(self) -> Token:
        if not self._at_end():
            self._current += 1
        return self._previous()

    def _check(self, kind: TokenType) -> bool:
        return not self._at_end() and self._peek().type is kind

    def _match(self, *kinds: TokenType) -> bool:
        for kind in kinds:
            if self._check(kind):
                self._advance()
                return True
        return False

    def _error(self, message: str) -> ParseError:
        token = self._peek()
        logger.error(f"{message} at line {token.line}")
        return ParseError(message, token.line, token.column)

    def _consume(self, kind: TokenType, message: str) -> Token:
        if self._check(kind):
            return self._advance()
        raise self._error(message)

    # Types

    def _parse_type(self) -> Type:
        if not self._at_end() and self._peek().type in _TYPE_TOKENS:
            return _TYPE_TOKENS[self._advance().type]
        raise self._error("Expected type")

    # Expressions

    def _parse_expression(self) -> Expr:
        return self._parse_equality()

    def _binary_level(
        self, operand: Callable[[], Expr], ops: Mapping[TokenType, BinaryOp]
    ) -> Expr:
        expr = operand()
        while self._match(*ops):
            op = self._previous()
            right = operand()
            expr = BinaryExpr(expr, ops[op.type], right, line=op.line, column=op.column)
        return expr

    def _parse_equality(self) -> Expr:
        return self._binary_level(self._parse_comparison, _EQUALITY_OPS)

    def _parse_comparison(self) -> Expr:
        return self._binary_level(self._parse_term, _COMPARISON_OPS)

    def _parse_term(self) -> Expr:
        return self._binary_level(self._parse_factor, _TERM_OPS)

    def _parse_factor(self) -> Expr:
        return self._binary_level(self._parse_unary, _FACTOR_OPS)

    def _parse_unary(self) -> Expr:
        if self._match(*_UNARY_OPS):
            op = self._previous()
            operand = self._parse_unary()
            return UnaryExpr(_UNARY_OPS[op.type], operand, line=op.line, column=op.column)
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        if self._match(TokenType.INT_LITERAL):
            token = self._previous()
            return LiteralExpr(token.value, Type.I32, line=token.line, column=token.column)
        if self._match(TokenType.FLOAT_LITERAL):
            token = self._previous()
            return LiteralExpr(token.value, Type.F32, line=token.line, column=token.column)
        if self._match(TokenType.TRUE):
            token = self._previous()
            return LiteralExpr("1", Type.BOOL, line=token.line, column=token.column)
        if self._match(TokenType.FALSE):
            token = self._previous()
            return LiteralExpr("0", Type.BOOL, line=token.line, column=token.column)
        if self._match(TokenType.IDENTIFIER):
            token = self._previous()
            if self._check(TokenType.LPAREN):
                self._consume(TokenType.LPAREN, "Expected '(' after identifier")
                args: list[Expr] = []
                if not self._check(TokenType.RPAREN):
                    args.append(self._parse_expression())
                    while self._match(TokenType.COMMA):
                        args.append(self._parse_expression())
                self._consume(TokenType.RPAREN, "Expected ')' after arguments")
                return CallExpr(token.value, args, line=token.line, column=token.column)
            return VariableExpr(token.value, line=token.line, column=token.column)
        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr
        raise self._error("Expected expression")

    # Statements

    def _parse_return(self) -> ReturnStmt:
        keyword = self._previous()
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after return")
        return ReturnStmt(expr, line=keyword.line, column=keyword.column)

    def _parse_let(self) -> LetStmt:
        keyword = self._previous()
        name = self._consume(TokenType.IDENTIFIER, "Expected variable name")
        self._consume(TokenType.COLON, "Expected ':' after variable name")
        var_type = self._parse_type()
        self._consume(TokenType.ASSIGN, "Expected '=' after type")
        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after let statement")
        return LetStmt(name.value, var_type, value, line=keyword.line, column=keyword.column)

    def _parse_statement(self) -> Stmt:
        if self._match(TokenType.RETURN):
            return self._parse_return()
        if self._match(TokenType.LET):
            return self._parse_let()
        # A bare expression statement is kept as a position-less return.
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "Expected ';' after statement")
        return ReturnStmt(expr, line=0, column=0)

    # Declarations

    def _parse_parameter(self) -> tuple[str, Type]:
        name = self._consume(TokenType.IDENTIFIER, "Expected parameter name")
        self._consume(TokenType.COLON, "Expected ':' after parameter name")
        return name.value, self._parse_type()

    def _parse_function(self) -> Function:
        name = self._consume(TokenType.IDENTIFIER, "Expected function name")
        self._consume(TokenType.LPAREN, "Expected '(' after function name")

        params: list[tuple[str, Type]] = []
        if not self._check(TokenType.RPAREN):
            params.append(self._parse_parameter())
            while self._match(TokenType.COMMA):
                params.append(self._parse_parameter())

        self._consume(TokenType.RPAREN, "Expected ')' after parameters")
        self._consume(TokenType.ARROW, "Expected '->' after parameters")
        return_type = self._parse_type()
        self._consume(TokenType.LBRACE, "Expected '{' before function body")

        body: list[Stmt] = []
        while not self._check(TokenType.RBRACE) and not self._at_end():
            body.append(self._parse_statement())

        self._consume(TokenType.RBRACE, "Expected '}' after function body")
        return Function(name.value, return_type, params, body)

    def parse(self) -> Program:
        """Parse every function declaration; raise :class:`ParseError` on bad input."""
        program = Program()
        while not self._at_end():
            if self._match(TokenType.FN):
                program.add_function(self._parse_function())
            else:
                self._consume(TokenType.FN, "Expected function declaration")
        return program


def parse_source(source: str) -> Program:
    """Tokenise and parse ``source`` into a program."""
    logger.info("ParserAgent: Starting lexical analysis")
    tokens = tokenize(source)
    logger.info("ParserAgent: Starting parsing")
    program = Parser(tokens).parse()
    logger.info("ParserAgent: Parsing completed")
    return program


def read_file(filename: str) -> str:
    """Return the whole text of ``filename``; raise ``OSError`` if it cannot be opened."""
    try:
        with open(filename, encoding="utf-8", newline="") as handle:
            return handle.read()
    except OSError as exc:
        logger.error(f"ParserAgent: Cannot open file: {filename}")
        raise OSError(f"Cannot open file: {filename}") from exc


def validate_ast(program: Optional[Program]) -> None:
    """Check that a program exists, warning when it declares no functions."""
    logger.info("ASTAgent: Validating AST")
    if program is None:
        logger.error("ASTAgent: Program is null")
        raise ValueError("Invalid AST: program is null")
    if not program.functions:
        logger.warning("ASTAgent: No functions in program")
    logger.info("ASTAgent: AST validation completed")


def format_ast(program: Program, indent: int = 0) -> str:
    """Return a short outline of each function: name, parameter and statement counts."""
    outer = "  " * indent
    inner = "  " * (indent + 1)
    lines = []
    for func in program.functions:
        lines.append(f"{outer}Function: {func.name}")
        lines.append(f"{inner}Parameters: {len(func.params)}")
        lines.append(f"{inner}Statements: {len(func.body)}")
    return "".join(f"{line}\n" for line in lines)


def dump_ast(program: Program, indent: int = 0) -> None:
    """Print the outline produced by :func:`format_ast`."""
    print(format_ast(program, indent), end="")