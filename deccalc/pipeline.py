"""Text in, Decimal out: tokenize, parse and evaluate a single expression.

Every failure is raised as :class:`CalculatorError`, whose ``kind`` tells which
stage gave up and whose ``cause`` is the stage's own error.
"""
import enum
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from deccalc.parser import ParseErrorKind, ParserError, format_tree, parse
from deccalc.runtime import CalcRuntimeError, EvalContext, RuntimeErrorKind, evaluate_expression
from deccalc.tokenizer import TokenizerError, tokenize
from deccalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


class CalculatorErrorKind(PrintableEnum):
    LEX = enum.auto()
    PARSE = enum.auto()
    EMPTY_INPUT = enum.auto()
    UNASSIGNED_VARIABLE = enum.auto()
    DIVISION_BY_ZERO = enum.auto()
    TOO_DEEPLY_NESTED = enum.auto()


HEADLINES = {
    CalculatorErrorKind.LEX: "Unable to lex the provided expression",
    CalculatorErrorKind.PARSE: "Unable to parse the provided expression",
    CalculatorErrorKind.EMPTY_INPUT: "Can not evaluate empty input",
}

RUNTIME_ERROR_KINDS = {
    RuntimeErrorKind.UNASSIGNED_VARIABLE: CalculatorErrorKind.UNASSIGNED_VARIABLE,
    RuntimeErrorKind.DIVISION_BY_ZERO: CalculatorErrorKind.DIVISION_BY_ZERO,
    RuntimeErrorKind.TOO_DEEPLY_NESTED: CalculatorErrorKind.TOO_DEEPLY_NESTED,
}


@dataclass
class CalculatorError(Exception):
    kind: CalculatorErrorKind
    cause: Exception

    def __str__(self) -> str:
        if self.kind in HEADLINES:
            return f"{HEADLINES[self.kind]}\n{self.cause}"
        return str(self.cause)


def evaluate(code: str, context: Optional[EvalContext] = None, print_parse_tree: bool = False) -> Decimal:
    if context is None:
        context = EvalContext()

    try:
        tokens = tokenize(code)
    except TokenizerError as e:
        raise CalculatorError(CalculatorErrorKind.LEX, cause=e) from e

    try:
        tree = parse(tokens)
    except ParserError as e:
        if e.kind is ParseErrorKind.EMPTY_INPUT and not tokens:
            raise CalculatorError(CalculatorErrorKind.EMPTY_INPUT, cause=e) from e
        raise CalculatorError(CalculatorErrorKind.PARSE, cause=e) from e

    if print_parse_tree:
        try:
            rendered = format_tree(tree)
        except RecursionError:
            rendered = "<too deep to print>"
        print(f"Parse tree:\n{rendered}", file=sys.stderr, flush=True)

    try:
        result = evaluate_expression(tree, context)
    except CalcRuntimeError as e:
        raise CalculatorError(RUNTIME_ERROR_KINDS[e.kind], cause=e) from e

    logger.debug("Evaluated %r to %s", code, result)
    return result
