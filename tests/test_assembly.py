import pytest

from exprjit.assembly import (
    AssemblyGenerator,
    RegisterAllocationError,
    RegisterAllocator,
    RegisterType,
    X86Register,
)
from exprjit.ir import IRBuilder, IRGenerator, IRInstruction, IROp
from exprjit.lexer import lex
from exprjit.parser import parse

PROLOGUE = [
    "section .text",
    "global _start",
    "_start:",
    "    push rbp",
    "    mov rbp, rsp",
    "    sub rsp, 16",
]
EPILOGUE = ["    mov rsp, rbp", "    pop rbp", "    ret"]


def ir_for(source):
    builder = IRBuilder()
    result = IRGenerator(builder).generate(parse(lex(source)))
    builder.add_instruction(IRInstruction(IROp.RET, 0.0, result))
    return builder.instructions


def test_allocator_hands_out_registers_in_order():
    alloc = RegisterAllocator()
    assert alloc.allocate(0, RegisterType.INTEGER) is X86Register.RAX
    assert alloc.allocate(1, RegisterType.INTEGER) is X86Register.RBX
    assert alloc.allocate(2, RegisterType.FLOAT) is X86Register.XMM0
    assert alloc.register_of(1) is X86Register.RBX
    assert alloc.type_of(2) is RegisterType.FLOAT


def test_allocator_unknown_register_raises():
    alloc = RegisterAllocator()
    with pytest.raises(RegisterAllocationError, match="Register not allocated"):
        alloc.register_of(5)
    with pytest.raises(RegisterAllocationError, match="Register type not found"):
        alloc.type_of(5)


@pytest.mark.parametrize(
    "reg_type, limit, message",
    [
        (RegisterType.INTEGER, 14, "No more integer registers available"),
        (RegisterType.FLOAT, 16, "No more floating-point registers available"),
    ],
)
def test_allocator_runs_out(reg_type, limit, message):
    alloc = RegisterAllocator()
    given = [alloc.allocate(i, reg_type) for i in range(limit)]
    assert len(set(given)) == limit
    assert X86Register.RSP not in given and X86Register.RBP not in given
    with pytest.raises(RegisterAllocationError, match=message):
        alloc.allocate(limit, reg_type)


def test_allocator_clear_restarts():
    alloc = RegisterAllocator()
    first = alloc.allocate(0, RegisterType.INTEGER)
    alloc.allocate(1, RegisterType.INTEGER)
    alloc.clear()
    with pytest.raises(RegisterAllocationError):
        alloc.register_of(0)
    assert alloc.allocate(7, RegisterType.INTEGER) is first


def test_integer_program_layout():
    gen = AssemblyGenerator()
    code = gen.generate(ir_for("2 + 3"))
    assert code[: len(PROLOGUE)] == PROLOGUE
    assert code[-len(EPILOGUE):] == EPILOGUE
    assert "    add rcx, rbx" in code
    assert list(gen.code) == code


def test_float_program_uses_sse():
    code = AssemblyGenerator().generate(ir_for("1.5 + 2.5"))
    assert "    movsd xmm0, [rel float_const_0]" in code
    assert any(line.startswith("    addsd ") for line in code)
    assert code[-len(EPILOGUE) - 1].startswith("    movsd xmm0, ")


def test_integer_division_checks_zero():
    code = AssemblyGenerator().generate(ir_for("8 / 2"))
    assert "    xor rdx, rdx" in code
    assert "    jz division_by_zero" in code


def test_integer_multiply_goes_through_rax():
    code = AssemblyGenerator().generate(ir_for("4 * 5"))
    assert any(line.startswith("    mul ") for line in code)
    assert not any("mulsd" in line for line in code)


def test_generate_is_repeatable():
    gen = AssemblyGenerator()
    ir = ir_for("(1 + 2) * 3 - 4")
    first = gen.generate(ir)
    second = gen.generate(ir)
    assert first == second


def test_format_code_indents_every_line():
    gen = AssemblyGenerator()
    gen.generate(ir_for("6 - 1"))
    lines = gen.format_code().splitlines()
    assert len(lines) == len(gen.code)
    assert all(line == "   " + orig for line, orig in zip(lines, gen.code))


def test_missing_source_register_raises():
    ir = [IRInstruction(IROp.ADD, 0.0, 1, 0, 2)]
    with pytest.raises(RegisterAllocationError):
        AssemblyGenerator().generate(ir)