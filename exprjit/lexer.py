"""Tokenizer for simple arithmetic expressions."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable

_WHITESPACE = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset("0123456789")


class TokenType(enum.Enum):
    """Kinds of token produced by the lexer."""

    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    MULTIPLY = enum.auto()
    DIVIDE = enum.auto()
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    EOF = enum.auto()
    ERROR = enum.auto()

    @property
    def label(self) -> str:
        """Display name of the token type, e.g. ``TOKEN_PLUS``."""
        return f"TOKEN_{self.name}"


@dataclass(frozen=True)
class Token:
    """A lexical token with its numeric value and source text."""

    type: TokenType
    value: float = 0.0
    lexeme: str = ""


class LexError(ValueError):
    """Raised when the input cannot be split into tokens."""


_OPERATORS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


def _is_number_char(char: str) -> bool:
    return char in _DIGITS or char == "."


def lex(source: str) -> list[Token]:
    """Split *source* into tokens, ending with an EOF token."""
    tokens: list[Token] = []
    position = 0
    length = len(source)

    while position < length:
        char = source[position]

        if char in _WHITESPACE:
            position += 1
            continue

        if _is_number_char(char):
            start = position
            seen_decimal = False
            while position < length and _is_number_char(source[position]):
                if source[position] == ".":
                    if seen_decimal:
                        raise LexError(
                            "Invalid number format: multiple decimal points"
                        )
                    seen_decimal = True
                position += 1
            text = source[start:position]
            try:
                value = float(text)
            except ValueError as exc:
                raise LexError(f"Invalid number: {text}") from exc
            tokens.append(Token(TokenType.NUMBER, value, text))
            continue

        token_type = _OPERATORS.get(char)
        if token_type is None:
            raise LexError(f"Unexpected character: {char}")
        tokens.append(Token(token_type, 0.0, char))
        position += 1

    tokens.append(Token(TokenType.EOF, 0.0, ""))
    return tokens


def _describe(token: Token) -> str:
    if token.type is TokenType.NUMBER:
        return f"{token.type.label}({token.value:.0f})"
    return token.type.label


def format_tokens(tokens: Iterable[Token]) -> str:
    """Render tokens as a bracketed list, leaving out the EOF marker."""
    shown = (_describe(t) for t in tokens if t.type is not TokenType.EOF)
    return "[" + ", ".join(shown) + "]"