"""
CTP line protocol: request framing and response encoding.

A request is a single expression terminated by CRLF, at most
`max_request_bytes` long including the terminator. A response is

    Status: <status>\\r\\n
    Result: <integer>\\r\\n      (only when status is ok)
"""

import structlog

from ctp_calc.models import ParseOutcome, ProtocolError, Status
from ctp_calc.observers import ParseObserver
from ctp_calc.parser import evaluate

logger = structlog.get_logger()

TERMINATOR = b"\r\n"
DEFAULT_MAX_REQUEST = 80
# Every byte maps to one character; non-ASCII bytes are then rejected by the scanner
ENCODING = "latin-1"


def frame_request(data: bytes, max_length: int = DEFAULT_MAX_REQUEST) -> str | Status:
    """
    Validate the framing of a raw request.

    Returns the expression text with the terminator removed, or the framing
    error status: MAX_LENGTH_EXCEEDED when `max_length` bytes arrived without
    a line feed, MALFORMED_REQ when the CRLF terminator is missing or the
    expression is empty.
    """
    if len(data) >= max_length and not data.endswith(b"\n"):
        return Status.MAX_LENGTH_EXCEEDED
    if len(data) <= len(TERMINATOR) or not data.endswith(TERMINATOR):
        return Status.MALFORMED_REQ
    return data[: -len(TERMINATOR)].decode(ENCODING)


def handle_request(
    data: bytes,
    max_length: int = DEFAULT_MAX_REQUEST,
    observer: ParseObserver | None = None,
) -> ParseOutcome:
    """Frame a raw request and, if the framing is valid, evaluate it."""
    framed = frame_request(data, max_length)
    if isinstance(framed, Status):
        logger.info("Rejected request", status=framed.value, size=len(data))
        return ParseOutcome.failure(framed)

    logger.info("Expression received", expression=framed)
    return evaluate(framed, observer)


def encode_request(expression: str) -> bytes:
    """Encode an expression as a CTP request line."""
    return expression.encode(ENCODING, errors="replace") + TERMINATOR


def render_response(outcome: ParseOutcome) -> bytes:
    """Render an outcome as CTP response lines."""
    lines = [f"Status: {outcome.status.render()}"]
    if outcome.ok:
        lines.append(f"Result: {outcome.result_text}")
    return "".join(line + "\r\n" for line in lines).encode("ascii")


def parse_response(data: bytes) -> ParseOutcome:
    """
    Decode CTP response lines back into a ParseOutcome.

    Raises ProtocolError if the response is not well formed.
    """
    try:
        text = data.decode("ascii")
    except UnicodeDecodeError as e:
        raise ProtocolError(f"Response is not ASCII: {e}") from e

    if not text.endswith("\r\n"):
        raise ProtocolError("Response is not CRLF terminated")
    lines = text[:-2].split("\r\n")

    key, _, value = lines[0].partition(": ")
    if key != "Status":
        raise ProtocolError(f"Expected a Status line, got {lines[0]!r}")
    try:
        status = Status(value)
    except ValueError:
        raise ProtocolError(f"Unknown status {value!r}") from None

    if status is not Status.OK:
        if len(lines) != 1:
            raise ProtocolError(f"Unexpected lines after {status.value} status")
        return ParseOutcome.failure(status)

    if len(lines) != 2:
        raise ProtocolError("An ok response must carry exactly one Result line")
    key, _, value = lines[1].partition(": ")
    if key != "Result":
        raise ProtocolError(f"Expected a Result line, got {lines[1]!r}")
    try:
        result = int(value)
    except ValueError:
        raise ProtocolError(f"Result is not an integer: {value!r}") from None
    return ParseOutcome.success(result)
