"""Command line entry point that evaluates a formula over series data."""

from __future__ import annotations

import argparse
import math
from collections.abc import Sequence

from .lexer import LexerError
from .parser import FormulaError, evaluate

__all__ = ["main"]

DEMO_EXPRESSION = """
V1:=(1+CLOSE)*2;
V2:=HHV(CLOSE, 5);
V3:=LLV(CLOSE, 5);
V4:=MA(V1+V2+V3, 5);
"""

DEMO_DATA = {"CLOSE": [10.0, 12.0, 15.0, 14.0, 16.0, 18.0, 20.0, 19.0, 22.0, 25.0]}


def _parse_series(spec: str) -> tuple[str, list[float]]:
    name, sep, values = spec.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=V1,V2,...: {spec!r}")
    try:
        return name, [float(v) for v in values.split(",")] if values else []
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number in {spec!r}") from None


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def main(argv: Sequence[str] | None = None) -> int:
    """Evaluate a formula and print each assigned variable."""
    parser = argparse.ArgumentParser(
        prog="seriesformula",
        description="Evaluate a series formula and print the assigned variables.",
    )
    parser.add_argument(
        "expression",
        nargs="?",
        default=DEMO_EXPRESSION,
        help="formula text; a demonstration formula is used when omitted",
    )
    parser.add_argument(
        "-s",
        "--series",
        action="append",
        type=_parse_series,
        metavar="NAME=V1,V2,...",
        help="an input series; may be repeated",
    )
    args = parser.parse_args(argv)
    data = dict(args.series) if args.series else DEMO_DATA

    try:
        table = evaluate(args.expression, data)
    except (LexerError, FormulaError) as exc:
        print(f"Error: {exc}")
        return 1

    for name in sorted(table):
        values = " ".join(_format_value(v) for v in table[name])
        print(f"{name}: [{values}]")
    return 0