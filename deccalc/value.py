import decimal
from decimal import Decimal

DEFAULT_DIVISION_PRECISION = 100

_TRAPS = [decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow]

# Large enough that literals, addition, subtraction, multiplication and negation never round
EXACT = decimal.Context(
    prec=decimal.MAX_PREC,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    rounding=decimal.ROUND_HALF_EVEN,
    traps=_TRAPS,
)


def division_context(precision: int) -> decimal.Context:
    if precision < 1:
        raise ValueError(f"Division precision must be at least 1, got {precision}")
    return decimal.Context(
        prec=precision,
        Emax=decimal.MAX_EMAX,
        Emin=decimal.MIN_EMIN,
        rounding=decimal.ROUND_HALF_EVEN,
        traps=_TRAPS,
    )


def parse_number(lexeme: str) -> Decimal:
    try:
        return EXACT.create_decimal(lexeme)
    except decimal.InvalidOperation as e:
        raise ValueError(f"{lexeme!r} is not a number") from e


def format_decimal(value: Decimal) -> str:
    """Plain positional notation, e.g. 2E+2 -> '200'; zero is never printed as '-0'"""
    if value.is_zero():
        value = value.copy_abs()
    return f"{value:f}"
