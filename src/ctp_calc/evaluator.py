"""
Applies a single operator to the operand stack.
"""

import structlog

from ctp_calc.models import InvalidExpressionError, loggable
from ctp_calc.operators import Operator
from ctp_calc.stack import Stack

logger = structlog.get_logger()


def truncating_divide(a: int, b: int) -> int:
    """Integer division rounding toward zero, as C does (Python's // floors)."""
    if b == 0:
        raise InvalidExpressionError("Cannot divide by zero")
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def apply_operator(operands: Stack[int], op: Operator) -> None:
    """
    Pop the operands `op` needs, compute, and push the result.

    Raises InvalidExpressionError when there are too few operands, on
    division by zero, or when `op` is not applicable (a left parenthesis).
    """
    if op is Operator.UNARY_MINUS:
        if len(operands) < 1:
            logger.debug("Insufficient elements in operand stack", operator=op.symbol)
            raise InvalidExpressionError("Unary minus needs an operand")
        operands.push(-operands.pop())
        return

    if not op.is_binary:
        raise InvalidExpressionError(f"'{op.symbol}' is not an operator")

    if len(operands) < 2:
        logger.debug("Insufficient elements in operand stack", operator=op.symbol)
        raise InvalidExpressionError(f"'{op.symbol}' needs two operands")

    b = operands.pop()
    a = operands.pop()
    logger.debug("Eval", a=loggable(a), op=op.symbol, b=loggable(b))

    if op is Operator.PLUS:
        result = a + b
    elif op is Operator.MINUS:
        result = a - b
    elif op is Operator.TIMES:
        result = a * b
    else:
        result = truncating_divide(a, b)

    operands.push(result)
