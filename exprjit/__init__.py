"""Arithmetic expression compiler: lexer, parser, IR, stack VM and x86-64 assembly listing."""

__version__ = "0.1.0"
__all__ = ["__version__"]