"""
Tokenizer for integer expressions.

Tokens are produced lazily so that the parser consumes each one before the
next character is even looked at; an invalid character therefore surfaces
only after everything before it has been handled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from ctp_calc.models import InvalidExpressionError, format_result
from ctp_calc.operators import (
    BINARY_OPERATORS,
    Operator,
    is_digit,
    is_operator_symbol,
    is_whitespace,
)


class TokenKind(str, Enum):
    OPERAND = "operand"
    OPERATOR = "operator"
    UNARY_MINUS = "unary_minus"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"


@dataclass(frozen=True)
class Token:
    """A single lexical token."""
    kind: TokenKind
    value: int | None = None
    operator: Operator | None = None
    position: int = 0

    def __str__(self) -> str:
        if self.kind is TokenKind.OPERAND:
            return format_result(self.value)
        if self.kind is TokenKind.UNARY_MINUS:
            return "-"
        if self.kind is TokenKind.LEFT_PAREN:
            return "("
        if self.kind is TokenKind.RIGHT_PAREN:
            return ")"
        return self.operator.symbol


# Token kinds after which '-' negates instead of subtracting
_UNARY_CONTEXT = (None, TokenKind.OPERATOR, TokenKind.LEFT_PAREN)


def tokenize(expression: str) -> Iterator[Token]:
    """
    Yield the tokens of an expression left to right.

    Whitespace (space, tab, CR, LF) is skipped anywhere. Raises
    InvalidExpressionError at the first character that is not a digit,
    an operator or a parenthesis.
    """
    last: TokenKind | None = None
    i = 0
    n = len(expression)

    while i < n:
        ch = expression[i]

        if is_whitespace(ch):
            i += 1
            continue

        if is_digit(ch):
            start = i
            value = 0
            # Accumulated digit by digit; int() on the slice is capped in length
            while i < n and is_digit(expression[i]):
                value = value * 10 + (ord(expression[i]) - ord("0"))
                i += 1
            token = Token(TokenKind.OPERAND, value=value, position=start)
        else:
            if ch == "-" and last in _UNARY_CONTEXT:
                token = Token(TokenKind.UNARY_MINUS, operator=Operator.UNARY_MINUS, position=i)
            elif is_operator_symbol(ch):
                token = Token(TokenKind.OPERATOR, operator=BINARY_OPERATORS[ch], position=i)
            elif ch == "(":
                token = Token(TokenKind.LEFT_PAREN, operator=Operator.LEFT_PAREN, position=i)
            elif ch == ")":
                token = Token(TokenKind.RIGHT_PAREN, position=i)
            else:
                raise InvalidExpressionError(f"Invalid character {ch!r} at position {i}")
            i += 1

        # A unary minus leaves the scanner in operator context, so '--3' is -(-3)
        last = TokenKind.OPERATOR if token.kind is TokenKind.UNARY_MINUS else token.kind
        yield token
