"""Compiler for a small typed expression language: lexer, parser, IR builder, verifier and command-line driver."""

__version__ = "0.1.0"
__all__ = ["__version__"]