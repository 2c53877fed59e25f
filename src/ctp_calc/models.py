"""
Core data models for CTP Calc.

Defines the status taxonomy shared by the parser, the line protocol and
the HTTP facade, the parse outcome value, the parser exception hierarchy,
and the request/response schemas of the HTTP API.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class Status(str, Enum):
    """Outcome of a request, valued by its wire string."""
    OK = "ok"
    MISMATCH = "mismatch"
    INVALID_EXPR = "invalid-expr"
    MAX_LENGTH_EXCEEDED = "max-length-exceeded"  # Framing layer only
    MALFORMED_REQ = "malformed-req"  # Framing layer only

    def render(self) -> str:
        """Return the string used on the wire."""
        return self.value


# =============================================================================
# Exceptions
# =============================================================================

class ExpressionError(Exception):
    """Base exception for expressions that cannot be evaluated."""
    status: Status = Status.INVALID_EXPR


class MismatchError(ExpressionError):
    """Raised when parentheses are unbalanced."""
    status = Status.MISMATCH


class InvalidExpressionError(ExpressionError):
    """Raised for bad tokens, missing operands or division by zero."""
    status = Status.INVALID_EXPR


class ProtocolError(Exception):
    """Raised when a CTP response cannot be decoded."""
    pass


# =============================================================================
# Result Rendering
# =============================================================================

# Digits per chunk; well under the interpreter's int/str conversion limit.
_CHUNK_DIGITS = 1000
_CHUNK = 10 ** _CHUNK_DIGITS
# Below this many bits an int always converts with plain str().
_SMALL_BITS = 3 * _CHUNK_DIGITS


def format_result(value: int) -> str:
    """
    Render an integer in decimal regardless of its size.

    str() refuses integers past the interpreter's digit limit, so large
    values are split into fixed-width base 10**1000 chunks first.
    """
    if value.bit_length() < _SMALL_BITS:
        return str(value)

    sign = "-" if value < 0 else ""
    value = abs(value)
    chunks = []
    while value >= _CHUNK:
        value, low = divmod(value, _CHUNK)
        chunks.append(f"{low:0{_CHUNK_DIGITS}d}")
    chunks.append(str(value))
    return sign + "".join(reversed(chunks))


def loggable(value):
    """Return a value safe to hand to a log renderer."""
    if isinstance(value, int) and value.bit_length() >= _SMALL_BITS:
        return format_result(value)
    return value


# =============================================================================
# Parse Outcome
# =============================================================================

@dataclass(frozen=True)
class ParseOutcome:
    """Status of one evaluation, with the result attached only when ok."""
    status: Status
    result: int | None = None

    def __post_init__(self):
        if self.status is Status.OK and self.result is None:
            raise ValueError("an ok outcome requires a result")
        if self.status is not Status.OK and self.result is not None:
            raise ValueError(f"a {self.status.value} outcome cannot carry a result")

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def result_text(self) -> str | None:
        """Decimal rendering of the result, or None when not ok."""
        if self.result is None:
            return None
        return format_result(self.result)

    @classmethod
    def success(cls, result: int) -> "ParseOutcome":
        return cls(Status.OK, result)

    @classmethod
    def failure(cls, status: Status) -> "ParseOutcome":
        return cls(status)


# =============================================================================
# API Models
# =============================================================================

class EvaluateRequest(BaseModel):
    """Request model for evaluating an expression over HTTP."""
    expression: str = Field(..., description="Infix integer expression, e.g. '(2+2)*3'")


class EvaluateResponse(BaseModel):
    """Response model mirroring the CTP Status/Result lines."""
    status: Status
    result: int | None = None

    @classmethod
    def from_outcome(cls, outcome: ParseOutcome) -> "EvaluateResponse":
        return cls(status=outcome.status, result=outcome.result)


class ServiceLimits(BaseModel):
    """Public limits advertised by the service."""
    max_request_bytes: int
    max_expression_length: int
