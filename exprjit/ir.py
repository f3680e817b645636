"""Register-based intermediate representation and its generator."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from .lexer import TokenType
from .parser import BinaryOpNode, Node, NumberNode


class IROp(enum.Enum):
    """Operations of the intermediate representation."""

    CONST = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    RET = enum.auto()


@dataclass(frozen=True)
class IRInstruction:
    """One IR instruction working on virtual registers."""

    op: IROp
    value: float = 0.0
    dest: int = -1
    src1: int = -1
    src2: int = -1


class IRBuilder:
    """Collects IR instructions and hands out virtual register numbers."""

    def __init__(self) -> None:
        self._instructions: list[IRInstruction] = []
        self._next_register = 0

    @property
    def instructions(self) -> tuple[IRInstruction, ...]:
        """The instructions added so far, in order."""
        return tuple(self._instructions)

    def allocate_register(self) -> int:
        """Return a fresh virtual register number."""
        register = self._next_register
        self._next_register += 1
        return register

    def add_instruction(self, instruction: IRInstruction) -> None:
        """Append *instruction* to the program."""
        self._instructions.append(instruction)

    def clear(self) -> None:
        """Drop all instructions and restart register numbering."""
        self._instructions.clear()
        self._next_register = 0


_BINARY_OPS = {
    TokenType.PLUS: IROp.ADD,
    TokenType.MINUS: IROp.SUB,
    TokenType.MULTIPLY: IROp.MUL,
    TokenType.DIVIDE: IROp.DIV,
}


class IRGenerator:
    """Lowers an expression tree into IR held by a builder."""

    def __init__(self, builder: IRBuilder) -> None:
        self.builder = builder

    def generate(self, node: Optional[Node]) -> int:
        """Emit IR for *node* and return the register holding its value.

        Returns -1 when there is no node.
        """
        if node is None:
            return -1
        if isinstance(node, NumberNode):
            register = self.builder.allocate_register()
            self.builder.add_instruction(
                IRInstruction(IROp.CONST, node.value, register)
            )
            return register
        if isinstance(node, BinaryOpNode):
            left = self.generate(node.left)
            right = self.generate(node.right)
            result = self.builder.allocate_register()
            op = _BINARY_OPS.get(node.op)
            if op is None:
                raise ValueError("Unsupported operator")
            self.builder.add_instruction(IRInstruction(op, 0.0, result, left, right))
            return result
        return -1


def _describe(instruction: IRInstruction) -> str:
    if instruction.op is IROp.CONST:
        return f"r{instruction.dest} = CONST {instruction.value:.0f}"
    if instruction.op is IROp.RET:
        return f"RET r{instruction.dest}"
    return (
        f"r{instruction.dest} = {instruction.op.name} "
        f"r{instruction.src1} r{instruction.src2}"
    )


def format_ir(instructions: Iterable[IRInstruction]) -> str:
    """Render IR instructions one per line."""
    return "\n".join(_describe(i) for i in instructions)