"""
CTP line-protocol server.

Accepts TCP connections, reads one CRLF-terminated expression per
connection, evaluates it, writes the Status/Result response and closes
the connection.
"""

import asyncio

import structlog

from ctp_calc.config import settings
from ctp_calc.observers import ParseObserver
from ctp_calc.protocol import handle_request, render_response

logger = structlog.get_logger()


class CalcServer:
    """
    Asyncio TCP server for the CTP protocol.

    Each connection is handled in its own task; evaluation itself is
    synchronous and shares no state between connections.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        max_request_bytes: int | None = None,
        read_timeout: float | None = None,
        backlog: int | None = None,
        observer: ParseObserver | None = None,
    ):
        self.host = host if host is not None else settings.host
        self.port = port if port is not None else settings.port
        self.max_request_bytes = (
            max_request_bytes if max_request_bytes is not None else settings.max_request_bytes
        )
        self.read_timeout = read_timeout if read_timeout is not None else settings.read_timeout
        self.backlog = backlog if backlog is not None else settings.backlog
        self.observer = observer

        self._server: asyncio.Server | None = None

    @property
    def bound_port(self) -> int:
        """The port actually bound, useful when started on port 0."""
        if self._server is None or not self._server.sockets:
            raise RuntimeError("Server is not started")
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """Bind the listening socket."""
        if self._server is not None:
            return

        self._server = await asyncio.start_server(
            self.handle_connection,
            host=self.host,
            port=self.port,
            backlog=self.backlog,
            reuse_address=True,
        )
        logger.info("Server listening", host=self.host, port=self.bound_port)

    async def serve_forever(self) -> None:
        """Start if needed and accept connections until cancelled."""
        await self.start()
        async with self._server:
            await self._server.serve_forever()

    async def close(self) -> None:
        """Stop accepting connections."""
        if self._server is None:
            return
        logger.info("Stopping server", port=self.port)
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    async def __aenter__(self) -> "CalcServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Serve a single request on a freshly accepted connection."""
        peer = writer.get_extra_info("peername")
        log = logger.bind(client=peer[0] if peer else "unknown")
        log.info("Request received from client")

        try:
            try:
                data = await asyncio.wait_for(self._read_request(reader), self.read_timeout)
            except asyncio.TimeoutError:
                log.warning("Timed out waiting for request", timeout=self.read_timeout)
                return

            if not data:
                log.info("Client closed without sending a request")
                return

            outcome = handle_request(data, self.max_request_bytes, self.observer)
            if outcome.ok:
                log.info("Request handled", status=outcome.status.value, result=outcome.result_text)
            else:
                log.info("Request handled", status=outcome.status.value)

            writer.write(render_response(outcome))
            await writer.drain()
        except ConnectionError as e:
            log.warning("Connection error", error=str(e))
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass  # Peer already gone

    async def _read_request(self, reader: asyncio.StreamReader) -> bytes:
        """Read until a line feed, the size limit, or EOF."""
        buffer = b""
        while len(buffer) < self.max_request_bytes:
            chunk = await reader.read(self.max_request_bytes - len(buffer))
            if not chunk:
                break
            buffer += chunk
            if buffer.endswith(b"\n"):
                break
        return buffer
