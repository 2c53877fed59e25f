"""
CTP line-protocol client.
"""

import asyncio

import structlog

from ctp_calc.models import ParseOutcome, ProtocolError
from ctp_calc.protocol import encode_request, parse_response

logger = structlog.get_logger()

# A response is two short lines; anything longer is not a CTP server
MAX_RESPONSE_BYTES = 4096


async def send_expression(
    host: str,
    port: int,
    expression: str,
    timeout: float = 10.0,
) -> ParseOutcome:
    """
    Send one expression to a CTP server and return the decoded outcome.

    Raises OSError (including ConnectionError) if the server cannot be
    reached, asyncio.TimeoutError if it does not answer in time, and
    ProtocolError if the answer is not a CTP response.
    """
    reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    try:
        writer.write(encode_request(expression))
        await writer.drain()

        data = await asyncio.wait_for(reader.read(MAX_RESPONSE_BYTES + 1), timeout)
        # The server closes after the response; read to EOF in case it was split
        while data and len(data) <= MAX_RESPONSE_BYTES:
            chunk = await asyncio.wait_for(reader.read(MAX_RESPONSE_BYTES + 1 - len(data)), timeout)
            if not chunk:
                break
            data += chunk
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass  # Server already closed its side

    if not data:
        raise ProtocolError("Server closed the connection without a response")
    if len(data) > MAX_RESPONSE_BYTES:
        raise ProtocolError(f"Response exceeds {MAX_RESPONSE_BYTES} bytes")

    outcome = parse_response(data)
    logger.debug("Response received", status=outcome.status.value, result=outcome.result)
    return outcome


class CalcClient:
    """Client bound to one server address."""

    def __init__(self, host: str, port: int, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    async def evaluate(self, expression: str) -> ParseOutcome:
        """Evaluate an expression on the server."""
        return await send_expression(self.host, self.port, expression, self.timeout)

    def evaluate_sync(self, expression: str) -> ParseOutcome:
        """Blocking wrapper for use outside an event loop."""
        return asyncio.run(self.evaluate(expression))
