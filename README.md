# exprjit

`exprjit` takes an arithmetic expression through the stages of a small
compiler and reports what each stage produces:

1. **Lexer** (`exprjit.lexer`) turns the text into tokens: numbers such as
   `42` or `3.5`, the operators `+ - * /` and parentheses. Whitespace is
   skipped.
2. **Parser** (`exprjit.parser`) builds a tree of `NumberNode` and
   `BinaryOpNode` values. `*` and `/` bind tighter than `+` and `-`, and all
   four associate to the left.
3. **IR generation** (`exprjit.ir`) lowers the tree to register-based
   instructions: `CONST`, `ADD`, `SUB`, `MUL`, `DIV` and `RET`.
4. **Virtual machine** (`exprjit.vm`) translates the IR into stack code,
   runs it and returns the result as a float.
5. **Assembly** (`exprjit.assembly`) writes an x86-64 listing for the same
   IR. Constants that are whole numbers go into general purpose registers
   (`rax`, `rbx`, ...), other constants into `xmm` registers; an operation
   takes the register kind of its left operand.

## Installation

```
pip install .
```

## Command line

```
exprjit
```

The command prompts for one line on standard input, prints the report of
every stage and finally the result, rounded to a whole number:

```
Enter an arithmetic expression: (2 + 3) * 4
...
20
```

If a stage fails, the command prints `error: <message>` to standard error and
exits with status 1.

## Library use

```python
from exprjit.compiler import Compiler

compiler = Compiler()
result = compiler.compile_and_execute("8 / (3 - 1)")
print(result)  # 4.0
```

`compile_and_execute(source, out=None)` writes its stage-by-stage report to
standard output by default; pass another text stream as `out` to capture it.

The stages can also be used one at a time:

```python
from exprjit.lexer import lex, format_tokens
from exprjit.parser import parse, format_ast
from exprjit.ir import IRBuilder, IRGenerator, IRInstruction, IROp, format_ir
from exprjit.vm import VirtualMachine, lower_ir
from exprjit.assembly import AssemblyGenerator

tokens = lex("1 + 2 * 3")
print(format_tokens(tokens))
tree = parse(tokens)
print(format_ast(tree))

builder = IRBuilder()
result_register = IRGenerator(builder).generate(tree)
builder.add_instruction(IRInstruction(IROp.RET, 0.0, result_register))
print(format_ir(builder.instructions))

vm = VirtualMachine()
for instruction in lower_ir(builder.instructions):
    vm.add_instruction(instruction)
print(vm.execute())        # 7.0
print(vm.format_trace())   # [] → [1] → [2] → [3] → [6] → [7] → returns 7

assembly = AssemblyGenerator()
assembly.generate(builder.instructions)
print(assembly.format_code())
```

Notes on behaviour:

- `parse` reads one expression from the start of the tokens and leaves any
  tokens after it unread, so `"1 2"` evaluates to `1`.
- The reports (`format_tokens`, `format_ast`, `format_ir`, the VM trace) show
  numbers with no decimal places, so fractions appear rounded there; the value
  returned by `compile_and_execute` and `VirtualMachine.execute` is not
  rounded.
- There is no unary minus: `-1` is rejected by the parser.

## Errors

Each stage raises its own exception:

- `LexError` (a `ValueError`) for an unexpected character or a number with
  more than one decimal point.
- `ParseError` (a `ValueError`) for a missing `)` or a place where a number
  or `(` was expected.
- `VMError` for division by zero, stack underflow, an empty stack at return,
  or a program with no `RET`.
- `RegisterAllocationError` when the assembly generator runs out of
  registers: there are 14 general purpose and 16 `xmm` registers, and every
  constant and every intermediate result takes one. This happens after the
  virtual machine has already run.

## What it does not do

The assembly listing is text only. It is not assembled, linked or run, and it
does not define the `float_const_<n>` data labels or the `division_by_zero`
label that it refers to. Results always come from the virtual machine.

## Development

```
pip install -e ".[test]"
pytest
```