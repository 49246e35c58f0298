"""Tokenize, parse and evaluate indicator formulas over price time series."""

__version__ = "0.1.0"
__all__ = ["lexer", "parser", "cli"]