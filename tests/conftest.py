"""Shared fixtures for the CTP Calc tests."""

import asyncio
import threading

import pytest

from ctp_calc.logs import configure_logging
from ctp_calc.observers import ParseObserver
from ctp_calc.server import CalcServer


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_logging("WARNING")
    yield


class CountingObserver(ParseObserver):
    """Records every stack event."""

    def __init__(self):
        self.pushes: dict[str, int] = {}
        self.pops: dict[str, int] = {}
        self.steps: list[tuple] = []

    def pushed(self, stack_name, item):
        self.pushes[stack_name] = self.pushes.get(stack_name, 0) + 1

    def popped(self, stack_name, item):
        self.pops[stack_name] = self.pops.get(stack_name, 0) + 1

    def scanned(self, token, operands, operators):
        self.steps.append((str(token), list(operands), list(operators)))


@pytest.fixture
def observer():
    return CountingObserver()


@pytest.fixture
def running_server():
    """A CalcServer on an ephemeral port, served from a background thread."""
    loop = asyncio.new_event_loop()
    server = CalcServer(host="127.0.0.1", port=0, read_timeout=5.0)
    loop.run_until_complete(server.start())

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield server

    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.run_until_complete(server.close())
    loop.close()
