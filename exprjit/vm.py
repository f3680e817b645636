"""Stack-based virtual machine that runs programs lowered from the IR."""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Callable, Iterable

from .ir import IRInstruction, IROp


class Opcode(enum.Enum):
    """Instructions understood by the virtual machine."""

    PUSH = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    RET = enum.auto()


@dataclass(frozen=True)
class VMInstruction:
    """One virtual machine instruction; *value* is used by PUSH only."""

    opcode: Opcode
    value: float = 0.0


class VMError(RuntimeError):
    """Raised when a program cannot run to completion."""


_BINARY: dict[Opcode, tuple[str, Callable[[float, float], float]]] = {
    Opcode.ADD: ("addition", operator.add),
    Opcode.SUB: ("subtraction", operator.sub),
    Opcode.MUL: ("multiplication", operator.mul),
    Opcode.DIV: ("division", operator.truediv),
}


def _show(value: float) -> str:
    return f"{value:.0f}"


class VirtualMachine:
    """Runs a list of instructions over a stack of floats."""

    def __init__(self) -> None:
        self._code: list[VMInstruction] = []
        self._stack: list[float] = []
        self._trace: list[str] = []

    @property
    def code(self) -> tuple[VMInstruction, ...]:
        """The loaded program."""
        return tuple(self._code)

    @property
    def stack(self) -> tuple[float, ...]:
        """Current stack contents, bottom first."""
        return tuple(self._stack)

    def add_instruction(self, instruction: VMInstruction) -> None:
        """Append *instruction* to the program."""
        self._code.append(instruction)

    def clear(self) -> None:
        """Drop the program and empty the stack."""
        self._code.clear()
        self._stack.clear()
        self._trace.clear()

    def execute(self) -> float:
        """Run the program and return the value of its RET instruction."""
        self._trace = ["[]"]
        for instruction in self._code:
            opcode = instruction.opcode
            if opcode is Opcode.PUSH:
                self._stack.append(instruction.value)
                self._trace.append(f"[{_show(instruction.value)}]")
            elif opcode is Opcode.RET:
                if not self._stack:
                    raise VMError("Stack empty during return")
                result = self._stack[-1]
                self._trace.append(f"returns {_show(result)}")
                return result
            else:
                name, function = _BINARY[opcode]
                if len(self._stack) < 2:
                    raise VMError(f"Stack underflow during {name}")
                right = self._stack.pop()
                left = self._stack.pop()
                if opcode is Opcode.DIV and right == 0.0:
                    raise VMError("Division by zero")
                result = function(left, right)
                self._stack.append(result)
                self._trace.append(f"[{_show(result)}]")
        raise VMError("No return instruction found")

    def format_trace(self) -> str:
        """Describe the stack operations of the last run."""
        return " → ".join(self._trace)


_LOWERING = {
    IROp.CONST: Opcode.PUSH,
    IROp.ADD: Opcode.ADD,
    IROp.SUB: Opcode.SUB,
    IROp.MUL: Opcode.MUL,
    IROp.DIV: Opcode.DIV,
    IROp.RET: Opcode.RET,
}


def lower_ir(ir: Iterable[IRInstruction]) -> list[VMInstruction]:
    """Translate IR, in evaluation order, into stack machine instructions."""
    return [
        VMInstruction(
            _LOWERING[i.op], i.value if i.op is IROp.CONST else 0.0
        )
        for i in ir
    ]