"""Tokenizer for the expression language.

Newlines separate statements, except inside (), [] and {} where they are
plain whitespace. ``#`` starts a comment that runs to the end of the line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from exprdoc.errors import ExpressionError


class TokenKind(Enum):
    IDENT = "identifier"
    STRING = "string"
    RAW_STRING = "raw string"
    REGEX = "regex"
    INTEGER = "integer"
    FLOAT = "float"
    PUNCT = "punctuation"
    NEWLINE = "newline"
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int

    def describe(self) -> str:
        if self.kind in (TokenKind.EOF, TokenKind.NEWLINE):
            return self.kind.value
        return f"{self.kind.value} {self.text!r}"


_PUNCT = "()[]{},:;=!."
_DIGITS = "0123456789"
_OPEN = "([{"
_CLOSE = ")]}"
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "{": "{",
    "}": "}",
}


def _is_digit(ch: str) -> bool:
    """True for a single ASCII digit."""
    return len(ch) == 1 and ch in _DIGITS


def _parse_error(message: str, start: int, end: int) -> ExpressionError:
    return ExpressionError(f"{message} at ({start}:{end})", kind="parse")


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    depth = 0
    pos = 0
    n = len(source)

    while pos < n:
        ch = source[pos]

        if ch == "\n":
            if depth == 0:
                tokens.append(Token(TokenKind.NEWLINE, "\n", pos, pos + 1))
            pos += 1
        elif ch.isspace():
            pos += 1
        elif ch == "#":
            while pos < n and source[pos] != "\n":
                pos += 1
        elif ch == '"':
            tokens.append(_string(source, pos))
            pos = tokens[-1].end
        elif ch in "rs" and source[pos + 1 : pos + 2] == "'":
            end = source.find("'", pos + 2)
            if end == -1:
                raise _parse_error("unterminated literal", pos, n)
            kind = TokenKind.REGEX if ch == "r" else TokenKind.RAW_STRING
            tokens.append(Token(kind, source[pos + 2 : end], pos, end + 1))
            pos = end + 1
        elif _is_digit(ch) or (ch == "-" and _is_digit(source[pos + 1 : pos + 2])):
            tokens.append(_number(source, pos))
            pos = tokens[-1].end
        elif ch.isalpha() or ch == "_":
            start = pos
            while pos < n and (source[pos].isalnum() or source[pos] == "_"):
                pos += 1
            tokens.append(Token(TokenKind.IDENT, source[start:pos], start, pos))
        elif ch in _PUNCT:
            if ch in _OPEN:
                depth += 1
            elif ch in _CLOSE:
                depth = max(depth - 1, 0)
            tokens.append(Token(TokenKind.PUNCT, ch, pos, pos + 1))
            pos += 1
        else:
            raise _parse_error(f"unexpected character {ch!r}", pos, pos + 1)

    tokens.append(Token(TokenKind.EOF, "", n, n))
    return tokens


def _string(source: str, start: int) -> Token:
    chars: list[str] = []
    pos = start + 1
    n = len(source)
    while pos < n:
        ch = source[pos]
        if ch == '"':
            return Token(TokenKind.STRING, "".join(chars), start, pos + 1)
        if ch == "\\":
            nxt = source[pos + 1 : pos + 2]
            if nxt not in _ESCAPES:
                raise _parse_error(f"invalid escape '\\{nxt}'", pos, pos + 2)
            chars.append(_ESCAPES[nxt])
            pos += 2
            continue
        chars.append(ch)
        pos += 1
    raise _parse_error("unterminated string literal", start, n)


def _number(source: str, start: int) -> Token:
    pos = start + 1
    n = len(source)
    is_float = False
    while pos < n:
        ch = source[pos]
        if _is_digit(ch) or ch == "_":
            pos += 1
        elif ch == "." and not is_float and _is_digit(source[pos + 1 : pos + 2]):
            is_float = True
            pos += 1
        else:
            break
    text = source[start:pos].replace("_", "")
    return Token(TokenKind.FLOAT if is_float else TokenKind.INTEGER, text, start, pos)
