"""
Shunting-yard expression parser.

Scans an infix integer expression once, left to right, keeping an operand
stack and an operator stack. Operators are reduced as soon as precedence
allows; reducing on `<=` makes equal-precedence binary operators
left-associative. The first error aborts the scan.

    >>> evaluate("(2+2)*3")
    ParseOutcome(status=<Status.OK: 'ok'>, result=12)
    >>> evaluate("1+2)").status
    <Status.MISMATCH: 'mismatch'>
"""

import structlog

from ctp_calc.evaluator import apply_operator
from ctp_calc.models import (
    ExpressionError,
    InvalidExpressionError,
    MismatchError,
    ParseOutcome,
)
from ctp_calc.observers import ParseObserver
from ctp_calc.operators import Operator, is_operator, precedence
from ctp_calc.scanner import TokenKind, tokenize
from ctp_calc.stack import Stack

logger = structlog.get_logger()


def parse_expression(expression: str, observer: ParseObserver | None = None) -> int:
    """
    Evaluate an expression and return its integer value.

    Raises MismatchError for unbalanced parentheses and
    InvalidExpressionError for everything else that is wrong with it.
    Both stacks are emptied before returning, whatever the outcome.
    """
    with Stack[int]("operands", observer) as operands, \
            Stack[Operator]("operators", observer) as operators:
        for token in tokenize(expression):
            if token.kind is TokenKind.OPERAND:
                operands.push(token.value)

            elif token.kind is TokenKind.UNARY_MINUS:
                # Highest precedence; nothing on the stack can outrank it
                operators.push(Operator.UNARY_MINUS)

            elif token.kind is TokenKind.OPERATOR:
                op = token.operator
                while (
                    operators
                    and is_operator(operators.top())
                    and precedence(op) <= precedence(operators.top())
                ):
                    apply_operator(operands, operators.pop())
                operators.push(op)

            elif token.kind is TokenKind.LEFT_PAREN:
                operators.push(Operator.LEFT_PAREN)

            elif token.kind is TokenKind.RIGHT_PAREN:
                while operators and operators.top() is not Operator.LEFT_PAREN:
                    apply_operator(operands, operators.pop())
                if not operators:
                    logger.debug("Too many right parentheses", position=token.position)
                    raise MismatchError(f"Unmatched ')' at position {token.position}")
                operators.pop()

            if observer is not None:
                observer.scanned(token, operands.snapshot(), operators.snapshot())

        while operators:
            op = operators.pop()
            if op is Operator.LEFT_PAREN:
                raise MismatchError("Unmatched '('")
            apply_operator(operands, op)

        if len(operands) == 0:
            raise InvalidExpressionError("Operand stack is empty")
        if len(operands) > 1:
            raise InvalidExpressionError(f"{len(operands)} operands remaining in stack")

        return operands.pop()


def evaluate(expression: str, observer: ParseObserver | None = None) -> ParseOutcome:
    """
    Evaluate an expression into a ParseOutcome.

    Never raises for a malformed expression: errors come back as the
    `mismatch` or `invalid-expr` status.
    """
    try:
        result = parse_expression(expression, observer)
    except ExpressionError as e:
        logger.debug("Parse failed", status=e.status.value, reason=str(e))
        return ParseOutcome.failure(e.status)
    return ParseOutcome.success(result)
