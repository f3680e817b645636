"""x86-64 style assembly listing generated from the IR."""

from __future__ import annotations

import enum
import math
from typing import Iterable

from .ir import IRInstruction, IROp


class X86Register(enum.Enum):
    """x86-64 general purpose and SSE registers."""

    RAX = "rax"
    RBX = "rbx"
    RCX = "rcx"
    RDX = "rdx"
    RSI = "rsi"
    RDI = "rdi"
    RBP = "rbp"
    RSP = "rsp"
    R8 = "r8"
    R9 = "r9"
    R10 = "r10"
    R11 = "r11"
    R12 = "r12"
    R13 = "r13"
    R14 = "r14"
    R15 = "r15"
    XMM0 = "xmm0"
    XMM1 = "xmm1"
    XMM2 = "xmm2"
    XMM3 = "xmm3"
    XMM4 = "xmm4"
    XMM5 = "xmm5"
    XMM6 = "xmm6"
    XMM7 = "xmm7"
    XMM8 = "xmm8"
    XMM9 = "xmm9"
    XMM10 = "xmm10"
    XMM11 = "xmm11"
    XMM12 = "xmm12"
    XMM13 = "xmm13"
    XMM14 = "xmm14"
    XMM15 = "xmm15"

    def __str__(self) -> str:
        return self.value


class RegisterType(enum.Enum):
    """Kind of machine register a value lives in."""

    INTEGER = enum.auto()
    FLOAT = enum.auto()


class RegisterAllocationError(RuntimeError):
    """Raised when registers run out or a register is unknown."""


_R = X86Register

_INTEGER_REGISTERS = (
    _R.RAX, _R.RBX, _R.RCX, _R.RDX, _R.RSI, _R.RDI, _R.R8, _R.R9,
    _R.R10, _R.R11, _R.R12, _R.R13, _R.R14, _R.R15,
)

_FLOAT_REGISTERS = (
    _R.XMM0, _R.XMM1, _R.XMM2, _R.XMM3, _R.XMM4, _R.XMM5, _R.XMM6, _R.XMM7,
    _R.XMM8, _R.XMM9, _R.XMM10, _R.XMM11, _R.XMM12, _R.XMM13, _R.XMM14, _R.XMM15,
)


class RegisterAllocator:
    """Maps virtual registers onto machine registers, first come first served."""

    def __init__(self) -> None:
        self._registers: dict[int, X86Register] = {}
        self._types: dict[int, RegisterType] = {}
        self._next_integer = 0
        self._next_float = 0

    def allocate(self, reg_id: int, reg_type: RegisterType) -> X86Register:
        """Give virtual register *reg_id* the next free register of *reg_type*."""
        if reg_type is RegisterType.INTEGER:
            if self._next_integer >= len(_INTEGER_REGISTERS):
                raise RegisterAllocationError("No more integer registers available")
            register = _INTEGER_REGISTERS[self._next_integer]
            self._next_integer += 1
        else:
            if self._next_float >= len(_FLOAT_REGISTERS):
                raise RegisterAllocationError(
                    "No more floating-point registers available"
                )
            register = _FLOAT_REGISTERS[self._next_float]
            self._next_float += 1
        self._registers[reg_id] = register
        self._types[reg_id] = reg_type
        return register

    def register_of(self, reg_id: int) -> X86Register:
        """Machine register assigned to *reg_id*."""
        try:
            return self._registers[reg_id]
        except KeyError:
            raise RegisterAllocationError("Register not allocated") from None

    def type_of(self, reg_id: int) -> RegisterType:
        """Register type assigned to *reg_id*."""
        try:
            return self._types[reg_id]
        except KeyError:
            raise RegisterAllocationError("Register type not found") from None

    def clear(self) -> None:
        """Forget every assignment."""
        self._registers.clear()
        self._types.clear()
        self._next_integer = 0
        self._next_float = 0


def _is_floating_point(value: float) -> bool:
    return not (math.isfinite(value) and float(value).is_integer())


_INTEGER_MNEMONICS = {IROp.ADD: "add", IROp.SUB: "sub"}
_FLOAT_MNEMONICS = {
    IROp.ADD: "addsd",
    IROp.SUB: "subsd",
    IROp.MUL: "mulsd",
    IROp.DIV: "divsd",
}

_PROLOGUE = (
    "section .text",
    "global _start",
    "_start:",
    "    push rbp",
    "    mov rbp, rsp",
    "    sub rsp, 16",
)


class AssemblyGenerator:
    """Produces an assembly listing for an IR program."""

    def __init__(self) -> None:
        self._code: list[str] = []
        self._allocator = RegisterAllocator()

    @property
    def code(self) -> tuple[str, ...]:
        """Lines of the most recently generated listing."""
        return tuple(self._code)

    def generate(self, ir: Iterable[IRInstruction]) -> list[str]:
        """Generate the listing for *ir*, replacing any earlier one."""
        instructions = list(ir)
        self._code = list(_PROLOGUE)
        self._allocator.clear()
        alloc = self._allocator

        for instruction in instructions:
            if instruction.op is IROp.CONST:
                kind = (
                    RegisterType.FLOAT
                    if _is_floating_point(instruction.value)
                    else RegisterType.INTEGER
                )
                alloc.allocate(instruction.dest, kind)
            elif instruction.op is not IROp.RET:
                alloc.allocate(instruction.dest, alloc.type_of(instruction.src1))

        for instruction in instructions:
            self._code.extend(self._emit(instruction))
        return list(self._code)

    def _emit(self, instruction: IRInstruction) -> list[str]:
        alloc = self._allocator
        op = instruction.op

        if op is IROp.CONST:
            reg = alloc.register_of(instruction.dest)
            if _is_floating_point(instruction.value):
                return [
                    f"    movsd xmm0, [rel float_const_{instruction.dest}]",
                    "    movsd [rsp], xmm0",
                    f"    movsd {reg}, [rsp]",
                ]
            return [f"    mov {reg}, {int(instruction.value)}"]

        if op is IROp.RET:
            result = alloc.register_of(instruction.dest)
            if alloc.type_of(instruction.dest) is RegisterType.FLOAT:
                move = f"    movsd xmm0, {result}"
            else:
                move = f"    mov rax, {result}"
            return [move, "    mov rsp, rbp", "    pop rbp", "    ret"]

        dest = alloc.register_of(instruction.dest)
        src1 = alloc.register_of(instruction.src1)
        src2 = alloc.register_of(instruction.src2)

        if alloc.type_of(instruction.dest) is RegisterType.FLOAT:
            return [
                f"    movsd {dest}, {src1}",
                f"    {_FLOAT_MNEMONICS[op]} {dest}, {src2}",
            ]
        if op in _INTEGER_MNEMONICS:
            return [
                f"    mov {dest}, {src1}",
                f"    {_INTEGER_MNEMONICS[op]} {dest}, {src2}",
            ]
        if op is IROp.MUL:
            return [
                f"    mov rax, {src1}",
                f"    mul {src2}",
                f"    mov {dest}, rax",
            ]
        return [
            f"    mov rax, {src1}",
            "    xor rdx, rdx",
            f"    test {src2}, {src2}",
            "    jz division_by_zero",
            f"    div {src2}",
            f"    mov {dest}, rax",
        ]

    def format_code(self) -> str:
        """Render the current listing, each line indented by three spaces."""
        return "\n".join(f"   {line}" for line in self._code)