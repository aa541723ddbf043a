import enum
import logging
import string
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from deccalc.utils import PrintableEnum
from deccalc.value import parse_number

logger = logging.getLogger(__name__)


class LexErrorKind(PrintableEnum):
    NON_ASCII_INPUT = enum.auto()
    ILLEGAL_TOKEN = enum.auto()
    ILLEGAL_NUMBER = enum.auto()


@dataclass
class TokenizerError(Exception):
    kind: LexErrorKind
    code: str
    error_char_idx: int
    lexeme: str = ""

    @property
    def errmsg(self) -> str:
        if self.kind is LexErrorKind.NON_ASCII_INPUT:
            return "The input must be ASCII"
        elif self.kind is LexErrorKind.ILLEGAL_TOKEN:
            return f'The token "{self.lexeme}" is not allowed'
        else:
            return f'"{self.lexeme}" is not a number'

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_char_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.error_char_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                f"[Tokenizer error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + self.code[print_start_idx:print_end_idx].rstrip("\n")
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    VARIABLE = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    EQUAL = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    pos: int = 0
    value: Optional[Decimal] = None

    @property
    def number(self) -> Decimal:
        if self.value is None:
            raise TypeError(f"{self} carries no number")
        return self.value

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


WHITESPACE = " \t\n\r\x0c"


def _is_valid_in_number(s: str) -> bool:
    return s in string.digits or s == "."


def _is_valid_variable_start(s: str) -> bool:
    return s in string.ascii_lowercase or s == "_"


def _is_valid_in_variable(s: str) -> bool:
    return s in string.ascii_lowercase or s == "-"


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    "=": TokenType.EQUAL,
}


def _consume_run(code: str, start: int, is_valid: Callable[[str], bool]) -> int:
    end = start + 1
    while end < len(code) and is_valid(code[end]):
        end += 1
    return end


def tokenize(code: str) -> list[Token]:
    if not code.isascii():
        error_idx = next(i for i, c in enumerate(code) if not c.isascii())
        raise TokenizerError(LexErrorKind.NON_ASCII_INPUT, code=code, error_char_idx=error_idx)

    i = 0
    tokens: list[Token] = []
    while i < len(code):
        if code[i] in WHITESPACE:
            pass
        elif code[i] in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[code[i]], lexeme=code[i], pos=i))
        elif _is_valid_in_number(code[i]):
            number_end_idx = _consume_run(code, i, _is_valid_in_number)
            lexeme = code[i:number_end_idx]
            try:
                value = parse_number(lexeme)
            except ValueError as e:
                raise TokenizerError(LexErrorKind.ILLEGAL_NUMBER, code=code, error_char_idx=i, lexeme=lexeme) from e
            tokens.append(Token(type=TokenType.NUMBER, lexeme=lexeme, pos=i, value=value))
            i = number_end_idx - 1  # to account for += 1 later
        elif _is_valid_variable_start(code[i]):
            variable_end_idx = _consume_run(code, i, _is_valid_in_variable)
            tokens.append(Token(type=TokenType.VARIABLE, lexeme=code[i:variable_end_idx], pos=i))
            i = variable_end_idx - 1
        else:
            raise TokenizerError(LexErrorKind.ILLEGAL_TOKEN, code=code, error_char_idx=i, lexeme=code[i])
        i += 1

    logger.debug("Tokenized %r: %s", code, " ".join(str(t) for t in tokens))
    return tokens


def untokenize(tokens: list[Token]) -> str:
    return " ".join(t.lexeme for t in tokens)
