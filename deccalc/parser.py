import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from deccalc.tokenizer import Token, TokenType, untokenize
from deccalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


class ParseErrorKind(PrintableEnum):
    UNMATCHED_PARENS = enum.auto()
    UNMATCHED_TOKEN = enum.auto()
    EXPECTED_BINARY_OPERATOR = enum.auto()
    EXPECTED_VARIABLE = enum.auto()
    EMPTY_INPUT = enum.auto()
    TOO_DEEPLY_NESTED = enum.auto()


PARSE_ERROR_MESSAGES = {
    ParseErrorKind.UNMATCHED_PARENS: "Input contains unmatched parenthesis",
    ParseErrorKind.UNMATCHED_TOKEN: "Input contains unmatched token",
    ParseErrorKind.EXPECTED_BINARY_OPERATOR: "Expected binary operator",
    ParseErrorKind.EXPECTED_VARIABLE: "Can only assign to variable",
    ParseErrorKind.EMPTY_INPUT: "Can not parse empty input",
    ParseErrorKind.TOO_DEEPLY_NESTED: "Expression is nested too deeply",
}


@dataclass
class ParserError(Exception):
    kind: ParseErrorKind
    tokens: list[Token]
    error_token_idx: int

    @property
    def errmsg(self) -> str:
        return PARSE_ERROR_MESSAGES[self.kind]

    def __str__(self) -> str:
        parsed_tokens = self.tokens[: self.error_token_idx]
        filler_whitespace = " " * (len(untokenize(parsed_tokens)) + (1 if parsed_tokens else 0))
        return "\n".join([f"[Parser error] {self.errmsg}", untokenize(self.tokens), filler_whitespace + "^"])


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()


@dataclass
class Number:
    value: Decimal


@dataclass
class Variable:
    name: str


@dataclass
class Negation:
    operand: "Expression"


@dataclass
class Assignment:
    name: str
    value: "Expression"


@dataclass
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


Expression = Number | Variable | Negation | Assignment | BinaryOperation

# low to high; tokens missing from the table end an expression
OPERATOR_PRECEDENCE = {
    TokenType.EQUAL: 0,
    TokenType.PLUS: 1,
    TokenType.MINUS: 1,
    TokenType.STAR: 2,
    TokenType.SLASH: 2,
}

BINARY_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
}

OPERAND_START_TOKENS = {TokenType.NUMBER, TokenType.VARIABLE, TokenType.BRACKET_OPEN}


def get_op_precedence(token: Optional[Token]) -> Optional[int]:
    if token is None:
        return None
    return OPERATOR_PRECEDENCE.get(token.type)


class TokenStream:
    """Token list consumed from the front, with the closing bracket of a group taken from the back"""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.head = 0
        self.tail = len(tokens)

    def __bool__(self) -> bool:
        return self.head < self.tail

    def peek(self) -> Optional[Token]:
        return self.tokens[self.head] if self else None

    def next(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.head += 1
        return token

    def next_back(self) -> Optional[Token]:
        if not self:
            return None
        self.tail -= 1
        return self.tokens[self.tail]

    def error(self, kind: ParseErrorKind, token_idx: Optional[int] = None) -> ParserError:
        return ParserError(kind, tokens=self.tokens, error_token_idx=self.head if token_idx is None else token_idx)


def parse(tokens: list[Token]) -> Expression:
    stream = TokenStream(tokens)
    try:
        expr = parse_expression(stream)
    except RecursionError as e:
        raise stream.error(ParseErrorKind.TOO_DEEPLY_NESTED) from e
    trailing = stream.peek()
    if trailing is not None:
        if trailing.type is TokenType.BRACKET_CLOSE:
            raise stream.error(ParseErrorKind.UNMATCHED_PARENS)
        elif trailing.type in OPERAND_START_TOKENS:
            raise stream.error(ParseErrorKind.EXPECTED_BINARY_OPERATOR)
        else:
            raise stream.error(ParseErrorKind.UNMATCHED_TOKEN)
    logger.debug("Parsed %d tokens", len(tokens))
    return expr


def parse_expression(stream: TokenStream) -> Expression:
    return _parse_expression_rec(_parse_primary(stream), stream, min_precedence=0)


def _parse_expression_rec(left: Expression, stream: TokenStream, min_precedence: int) -> Expression:
    while True:
        operator_idx = stream.head
        operator_token = stream.peek()
        operator_precedence = get_op_precedence(operator_token)
        if operator_token is None or operator_precedence is None or operator_precedence < min_precedence:
            return left
        stream.next()
        right = _parse_primary(stream)
        lookahead = get_op_precedence(stream.peek())
        # tighter-binding operators claim the right operand first
        while lookahead is not None and lookahead > operator_precedence:
            right = _parse_expression_rec(right, stream, min_precedence=lookahead)
            lookahead = get_op_precedence(stream.peek())
        left = _apply_operator(operator_token, left, right, stream, operator_idx)


def _apply_operator(
    operator_token: Token, left: Expression, right: Expression, stream: TokenStream, operator_idx: int
) -> Expression:
    if operator_token.type is TokenType.EQUAL:
        if not isinstance(left, Variable):
            raise stream.error(ParseErrorKind.EXPECTED_VARIABLE, token_idx=operator_idx)
        return Assignment(name=left.name, value=right)
    operator = BINARY_OPERATORS.get(operator_token.type)
    if operator is None:
        raise stream.error(ParseErrorKind.EXPECTED_BINARY_OPERATOR, token_idx=operator_idx)
    return BinaryOperation(operator=operator, left=left, right=right)


def _parse_primary(stream: TokenStream) -> Expression:
    token_idx = stream.head
    first = stream.next()
    if first is None:
        # an operator without its operand is a leftover token, not empty input
        previous = stream.tokens[token_idx - 1] if token_idx > 0 else None
        if previous is not None and previous.type in OPERATOR_PRECEDENCE:
            raise stream.error(ParseErrorKind.UNMATCHED_TOKEN, token_idx=token_idx - 1)
        raise stream.error(ParseErrorKind.EMPTY_INPUT)
    elif first.type is TokenType.BRACKET_OPEN:
        # the group's closing bracket is always the last token still in the stream
        closing_idx = stream.tail - 1
        closing = stream.next_back()
        if closing is None or closing.type is not TokenType.BRACKET_CLOSE:
            raise stream.error(ParseErrorKind.UNMATCHED_PARENS, token_idx=token_idx if closing is None else closing_idx)
        return parse_expression(stream)
    elif first.type is TokenType.NUMBER:
        return Number(first.number)
    elif first.type is TokenType.MINUS:
        return Negation(_parse_primary(stream))
    elif first.type is TokenType.VARIABLE:
        return Variable(first.lexeme)
    else:
        raise stream.error(ParseErrorKind.UNMATCHED_TOKEN, token_idx=token_idx)


def format_tree(node: Expression, indent: int = 0) -> str:
    """Indented, one-node-per-line rendering of a parse tree"""
    pad = "  " * indent
    if isinstance(node, Number):
        return f"{pad}Number({node.value})"
    elif isinstance(node, Variable):
        return f"{pad}Variable({node.name})"
    elif isinstance(node, Negation):
        return "\n".join([f"{pad}Neg", format_tree(node.operand, indent + 1)])
    elif isinstance(node, Assignment):
        return "\n".join([f"{pad}Assignment({node.name})", format_tree(node.value, indent + 1)])
    elif isinstance(node, BinaryOperation):
        return "\n".join(
            [
                f"{pad}{node.operator}",
                format_tree(node.left, indent + 1),
                format_tree(node.right, indent + 1),
            ]
        )
    else:
        raise TypeError(f"Unexpected parse tree node: {node!r}")
