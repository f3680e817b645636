"""Recursive-descent parser building an expression tree from tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .lexer import Token, TokenType


@dataclass(frozen=True)
class NumberNode:
    """A numeric literal."""

    value: float


@dataclass(frozen=True)
class BinaryOpNode:
    """A binary arithmetic operation."""

    op: TokenType
    left: "Node"
    right: "Node"


Node = Union[NumberNode, BinaryOpNode]


class ParseError(ValueError):
    """Raised when the tokens do not form a valid expression."""


_ADDITIVE = (TokenType.PLUS, TokenType.MINUS)
_MULTIPLICATIVE = (TokenType.MULTIPLY, TokenType.DIVIDE)


class _Parser:
    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> Optional[TokenType]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos].type
        return None

    def _match(self, token_type: TokenType) -> bool:
        if self._peek() is token_type:
            self._pos += 1
            return True
        return False

    def _match_any(self, token_types: tuple[TokenType, ...]) -> Optional[TokenType]:
        current = self._peek()
        if current in token_types:
            self._pos += 1
            return current
        return None

    def expression(self) -> Node:
        left = self.term()
        while (op := self._match_any(_ADDITIVE)) is not None:
            left = BinaryOpNode(op, left, self.term())
        return left

    def term(self) -> Node:
        left = self.factor()
        while (op := self._match_any(_MULTIPLICATIVE)) is not None:
            left = BinaryOpNode(op, left, self.factor())
        return left

    def factor(self) -> Node:
        if self._peek() is TokenType.NUMBER:
            node = NumberNode(self._tokens[self._pos].value)
            self._pos += 1
            return node
        if self._match(TokenType.LPAREN):
            inner = self.expression()
            if not self._match(TokenType.RPAREN):
                raise ParseError("Expected ')'")
            return inner
        raise ParseError("Expected number or '('")


def parse(tokens: Sequence[Token]) -> Node:
    """Parse one expression from the start of *tokens*.

    Tokens following a complete expression are left unread.
    """
    return _Parser(tokens).expression()


_SYMBOLS = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.MULTIPLY: "*",
    TokenType.DIVIDE: "/",
}


def format_ast(node: Optional[Node], indent: int = 0) -> str:
    """Render the tree as a small text diagram."""
    if node is None:
        return ""
    if isinstance(node, NumberNode):
        return f"{node.value:.0f}"
    pad = " " * (indent * 2)
    symbol = _SYMBOLS.get(node.op, "?")
    return (
        f"{pad}{symbol}\n"
        f"{pad}/ \\\n"
        f"{pad}"
        + format_ast(node.left, indent + 1)
        + " "
        + format_ast(node.right, indent + 1)
    )