import decimal
import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable

from deccalc.parser import Assignment, BinaryOperation, BinaryOperator, Expression, Negation, Number, Variable
from deccalc.utils import PrintableEnum
from deccalc.value import DEFAULT_DIVISION_PRECISION, EXACT, division_context

logger = logging.getLogger(__name__)


class RuntimeErrorKind(PrintableEnum):
    UNASSIGNED_VARIABLE = enum.auto()
    DIVISION_BY_ZERO = enum.auto()
    TOO_DEEPLY_NESTED = enum.auto()


@dataclass
class CalcRuntimeError(Exception):
    kind: RuntimeErrorKind
    name: str = ""

    @property
    def errmsg(self) -> str:
        if self.kind is RuntimeErrorKind.UNASSIGNED_VARIABLE:
            return f'Variable "{self.name}" has not been assigned'
        elif self.kind is RuntimeErrorKind.DIVISION_BY_ZERO:
            return "Division by zero"
        else:
            return "Expression is nested too deeply"

    def __str__(self) -> str:
        return self.errmsg


@dataclass
class EvalContext:
    """Variables assigned so far in a session, plus the digits kept by division.

    A single context must not be shared by evaluations running at the same time.
    """

    variables: dict[str, Decimal] = field(default_factory=dict)
    division_precision: int = DEFAULT_DIVISION_PRECISION

    def __post_init__(self) -> None:
        division_context(self.division_precision)

    @property
    def division(self) -> decimal.Context:
        return division_context(self.division_precision)

    def divide(self, a: Decimal, b: Decimal) -> Decimal:
        if b.is_zero():
            raise CalcRuntimeError(RuntimeErrorKind.DIVISION_BY_ZERO)
        return self.division.divide(a, b)


BinaryOperationImpl = Callable[[Decimal, Decimal, EvalContext], Decimal]

binary_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: lambda a, b, ctx: EXACT.add(a, b),
    BinaryOperator.SUB: lambda a, b, ctx: EXACT.subtract(a, b),
    BinaryOperator.MUL: lambda a, b, ctx: EXACT.multiply(a, b),
    BinaryOperator.DIV: lambda a, b, ctx: ctx.divide(a, b),
}


def evaluate_expression(expression: Expression, context: EvalContext) -> Decimal:
    try:
        return _evaluate(expression, context)
    except RecursionError as e:
        raise CalcRuntimeError(RuntimeErrorKind.TOO_DEEPLY_NESTED) from e


def _evaluate(expression: Expression, context: EvalContext) -> Decimal:
    if isinstance(expression, Number):
        return expression.value
    elif isinstance(expression, Variable):
        if expression.name not in context.variables:
            raise CalcRuntimeError(RuntimeErrorKind.UNASSIGNED_VARIABLE, name=expression.name)
        return context.variables[expression.name]
    elif isinstance(expression, Assignment):
        value = _evaluate(expression.value, context)
        context.variables[expression.name] = value
        logger.debug("Assigned %s = %s", expression.name, value)
        return value
    elif isinstance(expression, Negation):
        return EXACT.minus(_evaluate(expression.operand, context))
    elif isinstance(expression, BinaryOperation):
        left_res = _evaluate(expression.left, context)
        right_res = _evaluate(expression.right, context)
        return binary_impls[expression.operator](left_res, right_res, context)
    else:
        raise TypeError(f"Unexpected expression type: {expression!r}")
