"""Recursive-descent parser producing ``exprdoc.lang.nodes`` trees."""

from __future__ import annotations

import re

from exprdoc.errors import ExpressionError

from .lexer import Token, TokenKind, tokenize
from .nodes import (
    Argument,
    ArrayExpr,
    Assign,
    Call,
    Expr,
    Literal,
    ObjectExpr,
    Path,
    Program,
    Span,
    Statement,
    Variable,
)

_KEYWORDS = {"true": True, "false": False, "null": None}


class _Parser:
    def __init__(self, source: str) -> None:
        self.tokens = tokenize(source)
        self.pos = 0

    # -- token helpers ------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        i = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[i]

    def advance(self) -> Token:
        tok = self.peek()
        self.pos = min(self.pos + 1, len(self.tokens) - 1)
        return tok

    def at(self, text: str, offset: int = 0) -> bool:
        tok = self.peek(offset)
        return tok.kind == TokenKind.PUNCT and tok.text == text

    def expect(self, text: str) -> Token:
        if not self.at(text):
            raise self.unexpected(f"expected '{text}'")
        return self.advance()

    def unexpected(self, hint: str | None = None) -> ExpressionError:
        tok = self.peek()
        message = f"unexpected {tok.describe()}"
        if hint:
            message = f"{message}, {hint}"
        return ExpressionError(f"{message} at ({tok.start}:{tok.end})", kind="parse")

    def skip_separators(self) -> None:
        while self.peek().kind == TokenKind.NEWLINE or self.at(";"):
            self.advance()

    # -- grammar ------------------------------------------------------------

    def program(self) -> Program:
        statements: list[Statement] = []
        self.skip_separators()
        while self.peek().kind != TokenKind.EOF:
            statements.append(self.statement())
            if self.peek().kind != TokenKind.EOF and not (
                self.peek().kind == TokenKind.NEWLINE or self.at(";")
            ):
                raise self.unexpected("expected end of statement")
            self.skip_separators()
        return Program(tuple(statements))

    def statement(self) -> Statement:
        tok = self.peek()
        if tok.kind == TokenKind.IDENT and tok.text not in _KEYWORDS and self.at("=", 1):
            self.advance()
            self.advance()
            return Assign(Variable(tok.text, Span(tok.start, tok.end)), self.expression())
        if self.at("."):
            path = self.path()
            if self.at("="):
                self.advance()
                return Assign(path, self.expression())
            return path
        return self.expression()

    def expression(self) -> Expr:
        tok = self.peek()
        match tok.kind:
            case TokenKind.STRING | TokenKind.RAW_STRING:
                self.advance()
                return Literal(tok.text)
            case TokenKind.REGEX:
                self.advance()
                try:
                    return Literal(re.compile(tok.text))
                except re.error as e:
                    raise ExpressionError(
                        f"invalid regex: {e} at ({tok.start}:{tok.end})", kind="parse"
                    ) from e
            case TokenKind.INTEGER:
                self.advance()
                return Literal(int(tok.text))
            case TokenKind.FLOAT:
                self.advance()
                return Literal(float(tok.text))
            case TokenKind.IDENT:
                if tok.text in _KEYWORDS:
                    self.advance()
                    return Literal(_KEYWORDS[tok.text])
                if self.at("(", 1) or (self.at("!", 1) and self.at("(", 2)):
                    return self.call()
                self.advance()
                return Variable(tok.text, Span(tok.start, tok.end))
            case TokenKind.PUNCT:
                if tok.text == "[":
                    return self.array()
                if tok.text == "{":
                    return self.object()
                if tok.text == ".":
                    return self.path()
                if tok.text == "(":
                    self.advance()
                    inner = self.expression()
                    self.expect(")")
                    return inner
        raise self.unexpected("expected an expression")

    def path(self) -> Path:
        start = self.expect(".")
        segments: list[str] = []
        tok = self.peek()
        # ".foo" is a single token pair; ". foo" is the root followed by junk.
        if tok.kind == TokenKind.IDENT and tok.start == start.end:
            segments.append(self.advance().text)
            while self.at(".") and self.peek(1).kind == TokenKind.IDENT:
                self.advance()
                segments.append(self.advance().text)
        return Path(tuple(segments))

    def call(self) -> Call:
        name = self.advance()
        abort = False
        if self.at("!"):
            self.advance()
            abort = True
        self.expect("(")
        args: list[Argument] = []
        while not self.at(")"):
            if self.peek().kind == TokenKind.IDENT and self.at(":", 1):
                arg_name = self.advance().text
                self.advance()
                args.append(Argument(arg_name, self.expression()))
            else:
                args.append(Argument(None, self.expression()))
            if not self.at(","):
                break
            self.advance()
        end = self.expect(")")
        return Call(name.text, tuple(args), abort, Span(name.start, end.end))

    def array(self) -> ArrayExpr:
        self.expect("[")
        items: list[Expr] = []
        while not self.at("]"):
            items.append(self.expression())
            if not self.at(","):
                break
            self.advance()
        self.expect("]")
        return ArrayExpr(tuple(items))

    def object(self) -> ObjectExpr:
        self.expect("{")
        entries: list[tuple[str, Expr]] = []
        while not self.at("}"):
            key = self.peek()
            if key.kind not in (TokenKind.STRING, TokenKind.RAW_STRING):
                raise self.unexpected("expected a string key")
            self.advance()
            self.expect(":")
            entries.append((key.text, self.expression()))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        return ObjectExpr(tuple(entries))


def parse(source: str) -> Program:
    """Parse ``source`` into a Program. Raises ExpressionError(kind="parse")."""
    return _Parser(source).program()
