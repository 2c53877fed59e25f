"""
Operator classification and precedence rules.
"""

from enum import Enum

from ctp_calc.models import InvalidExpressionError


class Operator(str, Enum):
    """Entries of the operator stack."""
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIVIDE = "/"
    UNARY_MINUS = "~"  # Never appears in input; '-' is classified by context
    LEFT_PAREN = "("

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_binary(self) -> bool:
        return self in BINARY_OPERATORS.values()

    def __str__(self) -> str:
        return self.value


# Binary operators as they appear in input text
BINARY_OPERATORS: dict[str, Operator] = {
    "+": Operator.PLUS,
    "-": Operator.MINUS,
    "*": Operator.TIMES,
    "/": Operator.DIVIDE,
}

PRECEDENCE: dict[Operator, int] = {
    Operator.PLUS: 1,
    Operator.MINUS: 1,
    Operator.TIMES: 2,
    Operator.DIVIDE: 2,
    Operator.UNARY_MINUS: 3,
}

DIGITS = frozenset("0123456789")
WHITESPACE = frozenset(" \t\r\n")


def is_digit(ch: str) -> bool:
    """ASCII decimal digits only; str.isdigit() also accepts e.g. '²'."""
    return ch in DIGITS


def is_whitespace(ch: str) -> bool:
    return ch in WHITESPACE


def is_operator_symbol(ch: str) -> bool:
    return ch in BINARY_OPERATORS


def is_operator(item: Operator) -> bool:
    """True for anything that can be applied, i.e. not a left parenthesis."""
    return item in PRECEDENCE


def precedence(op: Operator) -> int:
    try:
        return PRECEDENCE[op]
    except KeyError:
        raise InvalidExpressionError(f"'{op}' has no precedence") from None
