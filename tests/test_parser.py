import math

import pytest

from seriesformula.lexer import tokenize
from seriesformula.parser import FormulaError, Parser, evaluate

CLOSE = [10, 12, 15, 14, 16, 18, 20, 19, 22, 25]
DATA = {"CLOSE": CLOSE}
CLOSE_F = [float(x) for x in CLOSE]


def run(expression, data=DATA):
    return evaluate(expression, data)


def test_variable_assignment_returns_series():
    assert run("A:=CLOSE;")["A"] == CLOSE_F


def test_colon_assignment_and_symbol_reuse():
    table = run("A:CLOSE; B:=A*1;")
    assert table["B"] == table["A"] == CLOSE_F


def test_number_is_broadcast_to_series_length():
    assert run("N:=7;")["N"] == [7.0] * len(CLOSE)


def test_number_with_empty_data_is_empty():
    assert evaluate("A:=5;", {}) == {"A": []}


def test_multiplication_binds_tighter():
    table = run("A:=1+2*CLOSE; B:=CLOSE*2+1;")
    assert table["A"] == table["B"]


def test_parentheses_group():
    table = run("C:=(1+2)*CLOSE; D:=CLOSE*3;")
    assert table["C"] == table["D"]


def test_subtraction_is_left_associative():
    table = run("A:=CLOSE-CLOSE-CLOSE; B:=0-CLOSE;")
    assert table["A"] == table["B"]


def test_division_round_trip():
    assert run("A:=CLOSE*4; B:=A/4;")["B"] == CLOSE_F


def test_ref_shifts_series():
    ref = run("R:=REF(CLOSE,3);")["R"]
    assert all(math.isnan(x) for x in ref[:3])
    assert ref[3:] == CLOSE_F[:-3]


def test_ref_zero_is_identity():
    assert run("R:=REF(CLOSE,0);")["R"] == CLOSE_F


def test_ref_beyond_length_is_all_nan():
    ref = run("R:=REF(CLOSE,20);")["R"]
    assert len(ref) == len(CLOSE)
    assert sum(1 for x in ref if math.isnan(x)) == len(CLOSE)


def test_ma_of_constant_series():
    assert evaluate("M:=MA(CLOSE,3);", {"CLOSE": [4, 4, 4, 4]})["M"] == [4.0] * 4


def test_ma_period_one_is_identity():
    assert run("M:=MA(CLOSE,1);")["M"] == CLOSE_F


def test_ma_lies_between_llv_and_hhv():
    table = run("M:=MA(CLOSE,3); H:=HHV(CLOSE,3); L:=LLV(CLOSE,3);")
    assert table["M"][0] == CLOSE_F[0]
    assert all(lo <= m <= hi for lo, m, hi in zip(table["L"], table["M"], table["H"]))


def test_ma_skips_nan():
    m = run("R:=REF(CLOSE,1); M:=MA(R,2);")["M"]
    assert math.isnan(m[0])
    assert m[1] == CLOSE_F[0]


def test_ma_period_zero_is_all_nan():
    ma = run("M:=MA(CLOSE,0);")["M"]
    assert len(ma) == len(CLOSE)
    assert sum(1 for x in ma if math.isnan(x)) == len(CLOSE)


def test_hhv_and_llv_on_increasing_series():
    table = evaluate("H:=HHV(CLOSE,3); L:=LLV(CLOSE,3);", {"CLOSE": [1, 2, 3, 5, 8]})
    assert table["H"] == [1.0, 2.0, 3.0, 5.0, 8.0]
    assert table["L"] == [1.0, 1.0, 1.0, 2.0, 3.0]


def test_hhv_llv_bound_close():
    table = run("V2:=HHV(CLOSE, 5); V3:=LLV(CLOSE, 5);")
    assert all(h >= c >= lo for h, c, lo in zip(table["V2"], CLOSE_F, table["V3"]))


def test_hhv_skips_nan():
    h = run("R:=REF(CLOSE,2); H:=HHV(R,2);")["H"]
    assert math.isnan(h[0]) and math.isnan(h[1])
    assert h[2] == CLOSE_F[0]


def test_expression_statement_is_not_evaluated():
    assert run("1/0;") == {}
    assert list(run("X:=CLOSE; CLOSE+X;")) == ["X"]


def test_empty_input_gives_empty_table():
    assert run("") == {}


def test_parser_from_tokens():
    parser = Parser(tokenize("A:=CLOSE;"), DATA)
    parser.parse_app()
    assert parser.result() == {"A": CLOSE_F}


@pytest.mark.parametrize("name", ["CLOSE", "MA", "EMA"])
def test_assigning_reserved_word_fails(name):
    with pytest.raises(FormulaError, match="reserved word"):
        run(f"{name}:=1;")


@pytest.mark.parametrize("name", ["SMA", "WMA", "EMA", "FOO"])
def test_unknown_function(name):
    with pytest.raises(FormulaError, match=f"undefined function: {name}"):
        run(f"A:={name}(CLOSE,3);")


@pytest.mark.parametrize(
    "expression, message",
    [
        ("A:=FOO;", "undefined variable or function: FOO"),
        ("A:=HIGH;", "undefined variable: HIGH"),
        ("A:=1", "expected ';'"),
        ("A:=CLOSE>1;", "expected ';'"),
        ("A:=CLOSE/0;", "division by zero"),
        ("A:=MA(CLOSE);", "two arguments"),
        ("A:=MA(CLOSE,2.5);", "integer"),
        ("A:=REF(CLOSE,1+1);", "integer"),
        ("A:=HHV(CLOSE,0);", "positive"),
        ("A:=LLV(CLOSE,0);", "positive"),
        ("A:=(CLOSE+1;", "expected '\\)'"),
        ("A:=MA(CLOSE;2);", "expected ',' or '\\)'"),
        ("A:=*CLOSE;", "unexpected token: \\*"),
        ("A:=;", "unexpected token: ;"),
        ("A:=CLOSE", "no more tokens"),
    ],
)
def test_errors(expression, message):
    with pytest.raises(FormulaError, match=message):
        run(expression)


def test_length_mismatch():
    with pytest.raises(FormulaError, match="length mismatch"):
        evaluate("A:=CLOSE+OPEN;", {"CLOSE": [1, 2, 3], "OPEN": [1, 2]})


def test_formula_error_is_value_error():
    with pytest.raises(ValueError):
        run("A:=FOO;")