"""
deccalc CLI - a small calculator intended as a bc alternative.

With an EXPRESSION argument the result is printed and the command exits,
otherwise every line read from stdin is evaluated against one shared context.
"""

import logging
import sys
from typing import Optional

import typer

from deccalc.pipeline import CalculatorError, evaluate
from deccalc.runtime import EvalContext
from deccalc.value import DEFAULT_DIVISION_PRECISION, format_decimal

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="A small calculator intended as a bc alternative.",
    add_completion=False,
)


def handle_input(code: str, context: EvalContext, print_parse_tree: bool) -> bool:
    try:
        result = evaluate(code, context, print_parse_tree=print_parse_tree)
    except CalculatorError as e:
        typer.echo(str(e), err=True)
        return False
    typer.echo(format_decimal(result))
    return True


@app.command()
def main(
    expression: Optional[str] = typer.Argument(
        None,
        help="Directly compute result of expression, if omitted, interactive mode is used",
    ),
    print_parse_tree: bool = typer.Option(
        False,
        "--print-parse-tree",
        envvar="DECCALC_PRINT_PARSE_TREE",
        help="Print the parse tree for the provided expression",
    ),
    precision: int = typer.Option(
        DEFAULT_DIVISION_PRECISION,
        "--precision",
        envvar="DECCALC_PRECISION",
        min=1,
        help="Significant digits kept by division",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every pipeline stage"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    context = EvalContext(division_precision=precision)

    if expression is not None:
        if not handle_input(expression, context, print_parse_tree):
            raise typer.Exit(code=1)
        return

    typer.echo("Type in an expression and hit enter")
    for line in sys.stdin:
        if not line.strip():
            continue
        handle_input(line, context, print_parse_tree)
    logger.debug("Input exhausted, %d variable(s) assigned", len(context.variables))
