import io

import pytest

from exprjit.assembly import AssemblyGenerator
from exprjit.compiler import Compiler, main
from exprjit.ir import IRBuilder, IRGenerator, IRInstruction, IROp, format_ir
from exprjit.lexer import LexError, format_tokens, lex
from exprjit.parser import ParseError, parse
from exprjit.vm import VMError


def _run(source):
    out = io.StringIO()
    result = Compiler().compile_and_execute(source, out)
    return result, out.getvalue()


def test_simple_addition():
    result, _ = _run("1 + 2")
    assert result == 3.0


def test_precedence_and_parentheses():
    result, _ = _run("(2 + 3) * 4 - 6 / 3")
    assert result == (2 + 3) * 4 - 6 / 3


def test_floating_point_values():
    result, _ = _run("1.5 * 2.5")
    assert result == 1.5 * 2.5


def test_sections_appear_in_order():
    _, output = _run("1 + 2")
    headers = [
        "1. Lexer:",
        "2. Parser:",
        "3. IR Generation:",
        "4. Virtual Machine:",
        "5. Assembly Code:",
    ]
    positions = [output.index(h) for h in headers]
    assert positions == sorted(positions)


def test_output_contains_tokens_and_input():
    source = "4 * (5 + 6)"
    _, output = _run(source)
    assert f'   Input: "{source}"' in output
    assert f"   Output: {format_tokens(lex(source))}" in output


def test_output_contains_ir_listing():
    source = "9 - 3 / 1"
    builder = IRBuilder()
    register = IRGenerator(builder).generate(parse(lex(source)))
    builder.add_instruction(IRInstruction(IROp.RET, 0.0, register))
    _, output = _run(source)
    for line in format_ir(builder.instructions).splitlines():
        assert f"   {line}\n" in output


def test_output_contains_assembly():
    source = "2 * 7"
    builder = IRBuilder()
    register = IRGenerator(builder).generate(parse(lex(source)))
    builder.add_instruction(IRInstruction(IROp.RET, 0.0, register))
    generator = AssemblyGenerator()
    generator.generate(builder.instructions)
    _, output = _run(source)
    assert output.endswith(generator.format_code() + "\n")


def test_vm_trace_starts_with_empty_stack():
    _, output = _run("8")
    assert "   Stack operations:\n   [] → [8] → returns 8\n" in output


def test_compiler_is_reusable():
    compiler = Compiler()
    first = compiler.compile_and_execute("6 / 4", io.StringIO())
    second = compiler.compile_and_execute("6 / 4", io.StringIO())
    assert first == second == 6 / 4


def test_division_by_zero_raises():
    with pytest.raises(VMError, match="Division by zero"):
        _run("1 / 0")


def test_bad_character_raises():
    with pytest.raises(LexError, match="Unexpected character"):
        _run("1 $ 2")


def test_unclosed_parenthesis_raises():
    with pytest.raises(ParseError, match="Expected '\\)'"):
        _run("(1 + 2")


def test_empty_input_raises():
    with pytest.raises(ParseError, match="Expected number or"):
        _run("")


def test_main_prints_result(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("(7)\n"))
    assert main([]) == 0
    output = capsys.readouterr().out
    assert output.startswith("Enter an arithmetic expression: ")
    assert output.splitlines()[-1] == "7"


def test_main_reports_error(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("5 / 0\n"))
    assert main([]) == 1
    assert "Division by zero" in capsys.readouterr().err