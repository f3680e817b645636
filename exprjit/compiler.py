"""Pipeline running an expression through every stage, and its command."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence, TextIO

from .assembly import AssemblyGenerator
from .ir import IRBuilder, IRGenerator, IRInstruction, IROp, format_ir
from .lexer import LexError, format_tokens, lex
from .parser import ParseError, format_ast, parse
from .vm import VirtualMachine, VMError, lower_ir
from .assembly import RegisterAllocationError


def _indent(text: str) -> str:
    return "\n".join(f"   {line}" for line in text.splitlines())


class Compiler:
    """Lexes, parses, lowers, runs and lists the assembly of an expression."""

    def __init__(self) -> None:
        self.vm = VirtualMachine()
        self.ir_builder = IRBuilder()
        self.ir_generator = IRGenerator(self.ir_builder)
        self.assembly = AssemblyGenerator()

    def compile_and_execute(self, source: str, out: Optional[TextIO] = None) -> float:
        """Run *source* through every stage, reporting each to *out*."""
        out = sys.stdout if out is None else out
        self.vm.clear()
        self.ir_builder.clear()

        out.write("\n1. Lexer:\n")
        out.write(f'   Input: "{source}"\n')
        tokens = lex(source)
        out.write(f"   Output: {format_tokens(tokens)}\n")

        out.write("\n2. Parser:\n")
        out.write("   Creates AST:\n")
        ast = parse(tokens)
        out.write(format_ast(ast, 0) + "\n")

        out.write("\n3. IR Generation:\n")
        out.write("   Generates IR instructions:\n")
        result_register = self.ir_generator.generate(ast)
        self.ir_builder.add_instruction(IRInstruction(IROp.RET, 0.0, result_register))
        out.write(_indent(format_ir(self.ir_builder.instructions)) + "\n")

        for instruction in lower_ir(self.ir_builder.instructions):
            self.vm.add_instruction(instruction)

        out.write("\n4. Virtual Machine:\n")
        out.write("   Stack operations:\n")
        try:
            result = self.vm.execute()
        except VMError:
            out.write(f"   {self.vm.format_trace()}")
            raise
        out.write(f"   {self.vm.format_trace()}\n")

        self.assembly.generate(self.ir_builder.instructions)
        out.write("\n5. Assembly Code:\n")
        out.write(self.assembly.format_code() + "\n")

        return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read an expression from standard input, compile and run it."""
    argparse.ArgumentParser(
        prog="exprjit",
        description="Compile and run an arithmetic expression read from standard input.",
    ).parse_args(argv)

    sys.stdout.write("Enter an arithmetic expression: ")
    sys.stdout.flush()
    line = sys.stdin.readline()
    expression = line[:-1] if line.endswith("\n") else line

    try:
        result = Compiler().compile_and_execute(expression, sys.stdout)
    except (LexError, ParseError, VMError, RegisterAllocationError, ValueError) as exc:
        sys.stdout.write("\n")
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"{result:.0f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())