from decimal import Decimal

import pytest

from deccalc.pipeline import CalculatorError, CalculatorErrorKind, evaluate
from deccalc.runtime import EvalContext


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", Decimal("1")),
        pytest.param("-1", Decimal("-1")),
        pytest.param("1+2", Decimal("3")),
        pytest.param("(1+2)", Decimal("3")),
        pytest.param("-(1+2)", Decimal("-3")),
        pytest.param("(((1)))", Decimal("1")),
        pytest.param("1 * 4 + 5", Decimal("9")),
        pytest.param("1 + 4 * 5", Decimal("21")),
        pytest.param("10 / 5 / 2 / 2", Decimal("0.5")),
        pytest.param("10 + 2 * (5 + 3 - 1)", Decimal("24")),
        pytest.param("42 - 42", Decimal("0")),
        pytest.param("2 * 42", Decimal("84")),
        pytest.param("42 / 2", Decimal("21")),
        pytest.param("5 + 10 * 2", Decimal("25")),
        pytest.param("2 * (10 + 11)", Decimal("42")),
        pytest.param("-2 * (10 + 11)", Decimal("-42")),
        pytest.param("5 - 5 + 5", Decimal("5")),
        pytest.param("0.1 + 0.2", Decimal("0.3")),
        pytest.param(".125 * 8", Decimal("1")),
        pytest.param("2 - -3", Decimal("5")),
        pytest.param("- -4", Decimal("4")),
        pytest.param("100 / 0.5", Decimal("200")),
        pytest.param("  7 * 6\n", Decimal("42")),
        pytest.param("devil = 666", Decimal("666")),
        pytest.param("x = 1 + 2 * 3", Decimal("7")),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: Decimal) -> None:
    assert evaluate(code) == expected_ret_val


def test_addition_is_exact() -> None:
    result = evaluate("0.1 + 0.2")
    assert result == Decimal("0.3")
    assert str(result) == "0.3"


def test_huge_operands_are_not_rounded() -> None:
    assert evaluate("123456789012345678901234567890 * 10 + 1") == Decimal("1234567890123456789012345678901")


def test_division_precision() -> None:
    assert evaluate("1 / 3", EvalContext(division_precision=5)) == Decimal("0.33333")
    assert len(str(evaluate("1 / 3"))) == len("0.") + 100


@pytest.mark.parametrize(
    "code",
    [
        "1 + 2 * 3",
        "10 - 4 - 3",
        "8 / 4 / 2",
        "2 * 3 + 4 * 5",
        "-1 - 2 * -3",
        "1.5 * 4 - 0.25 / 5",
    ],
)
def test_redundant_parens_do_not_change_result(code: str) -> None:
    assert evaluate(f"({code})") == evaluate(code)
    assert evaluate(f"(({code}))") == evaluate(code)


def test_variables_persist_in_context() -> None:
    context = EvalContext()
    assert evaluate("devil = 666", context) == Decimal("666")
    assert evaluate("devil - 666", context) == Decimal("0")
    assert context.variables == {"devil": Decimal("666")}


def test_fresh_context_per_call_by_default() -> None:
    evaluate("a = 1")
    with pytest.raises(CalculatorError) as exc_info:
        evaluate("a")
    assert exc_info.value.kind is CalculatorErrorKind.UNASSIGNED_VARIABLE


@pytest.mark.parametrize(
    "code, expected_kind",
    [
        pytest.param("1 + é", CalculatorErrorKind.LEX),
        pytest.param("2 ^ 3", CalculatorErrorKind.LEX),
        pytest.param("1.2.3", CalculatorErrorKind.LEX),
        pytest.param("(1 + 2", CalculatorErrorKind.PARSE),
        pytest.param("1 = 2", CalculatorErrorKind.PARSE),
        pytest.param("1 2", CalculatorErrorKind.PARSE),
        pytest.param("()", CalculatorErrorKind.PARSE),
        pytest.param("", CalculatorErrorKind.EMPTY_INPUT),
        pytest.param(" \n", CalculatorErrorKind.EMPTY_INPUT),
        pytest.param("nope + 1", CalculatorErrorKind.UNASSIGNED_VARIABLE),
        pytest.param("1 / 0", CalculatorErrorKind.DIVISION_BY_ZERO),
        pytest.param("0 / (1 - 1)", CalculatorErrorKind.DIVISION_BY_ZERO),
    ],
)
def test_eval_errors(code: str, expected_kind: CalculatorErrorKind) -> None:
    with pytest.raises(CalculatorError) as exc_info:
        evaluate(code)
    assert exc_info.value.kind is expected_kind
    assert exc_info.value.__cause__ is exc_info.value.cause


def test_error_messages() -> None:
    with pytest.raises(CalculatorError) as exc_info:
        evaluate("1 + é")
    assert str(exc_info.value).startswith("Unable to lex the provided expression\n")
    assert "The input must be ASCII" in str(exc_info.value)

    with pytest.raises(CalculatorError) as exc_info:
        evaluate("ghost")
    assert str(exc_info.value) == 'Variable "ghost" has not been assigned'


def test_failed_assignment_leaves_context_untouched() -> None:
    context = EvalContext(variables={"a": Decimal("1")})
    with pytest.raises(CalculatorError):
        evaluate("a = 1 / 0", context)
    assert context.variables == {"a": Decimal("1")}


def test_print_parse_tree(capsys: pytest.CaptureFixture[str]) -> None:
    assert evaluate("2 * -x", EvalContext(variables={"x": Decimal("3")}), print_parse_tree=True) == Decimal("-6")
    assert capsys.readouterr().err == "Parse tree:\nMUL\n  Number(2)\n  Neg\n    Variable(x)\n"


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("-" * 1000 + "1", id="negations"),
        pytest.param("(" * 600 + "1" + ")" * 600, id="parens"),
    ],
)
def test_deep_nesting_is_a_parse_error(code: str) -> None:
    with pytest.raises(CalculatorError) as exc_info:
        evaluate(code)
    assert exc_info.value.kind is CalculatorErrorKind.PARSE
    assert "Expression is nested too deeply" in str(exc_info.value)


def test_context_survives_deep_nesting_error() -> None:
    context = EvalContext()
    evaluate("a = 2", context)
    with pytest.raises(CalculatorError):
        evaluate("-" * 1000 + "a", context)
    assert evaluate("a * 21", context) == Decimal("42")
