# seriesformula

A small interpreter for indicator formulas of the kind used in charting
software. Statements assign the result of an expression over input series to
a named variable; every value is a whole series, not a single number.

```
V1:=(1+CLOSE)*2;
V2:=HHV(CLOSE, 5);
V3:=LLV(CLOSE, 5);
V4:=MA(V1+V2+V3, 5);
```

## Language

- Every statement ends with `;`. An assignment is `NAME := expr;` or
  `NAME : expr;`. A statement that is only an expression is checked for
  syntax but not evaluated, and adds nothing to the result.
- Expressions use `+ - * /` and parentheses, with the usual precedence.
  Operations work element by element; both sides must have the same length.
  Dividing by a series that holds a zero is an error.
- A number is repeated to the length of the first series in the input data.
- Input series are read by the names `CLOSE`, `OPEN`, `HIGH` and `LOW`; a
  name used in a formula must be present in the data given.
- Functions (the second argument must be a whole number written literally):
  - `MA(x, n)`: average of the last `n` values, skipping NaN; NaN where
    there are none.
  - `REF(x, n)`: the value `n` bars back, NaN where none exists.
  - `HHV(x, n)`: highest of the last `n` values, skipping NaN; `n` must be
    positive.
  - `LLV(x, n)`: lowest of the last `n` values, skipping NaN; `n` must be
    positive.
- Reserved words cannot be assigned to: `CLOSE OPEN HIGH LOW MA REF HHV LLV
  SMA WMA EMA`. Using a name that has not been assigned is an error.

## What it does not do

- `SMA`, `WMA` and `EMA` are reserved names, but calling them raises
  "undefined function".
- The lexer recognises comparison operators (`< > = ! <= >= == !=`), but
  expressions cannot use them; a formula containing one fails to parse.

## Use from Python

```python
from seriesformula.parser import evaluate

result = evaluate(
    "V1:=(1+CLOSE)*2; V2:=MA(CLOSE, 3);",
    {"CLOSE": [10, 12, 15, 14, 16]},
)
print(result["V2"])
```

`evaluate` returns a dict mapping each assigned name to its list of floats.
For finer control, tokenize and parse separately:

```python
from seriesformula.lexer import tokenize
from seriesformula.parser import Parser

parser = Parser(tokenize("A:=REF(CLOSE, 1);"), {"CLOSE": [1.0, 2.0, 3.0]})
parser.parse_app()
print(parser.result())
```

`Lexer(text).tokenize()` and `tokenize(text)` return a list of `Token`
objects, each with a `type` (`TokenType`) and a `value`. Lexing problems raise
`LexerError`; parse and evaluation problems raise `FormulaError`. Both are
subclasses of `ValueError`.

## Command line

Installing the package provides the `seriesformula` command. Run with no
arguments, it evaluates a demonstration formula over a sample closing-price
series:

```
seriesformula
```

Give your own formula and series with `-s/--series NAME=V1,V2,...`, which may
be repeated:

```
seriesformula "M:=MA(CLOSE, 2);" -s CLOSE=1,2,3,4
```

Each assigned variable is printed on its own line, in name order, as
`NAME: [v1 v2 ...]`. On an error the command prints `Error: ...` and exits
with status 1.

## Tests

```
pip install -e ".[test]"
pytest
```