"""
Parse tracing for CTP Calc.

A ParseObserver is injected by the caller of the parser to watch stack
traffic and scan progress. Stacks never carry tracing state themselves.
"""

from typing import Any, Sequence

import structlog

from ctp_calc.models import loggable

logger = structlog.get_logger()


class ParseObserver:
    """Observer with no-op hooks; override the ones you need."""

    def pushed(self, stack_name: str, item: Any) -> None:
        """Called after an item is pushed onto a stack."""
        pass

    def popped(self, stack_name: str, item: Any) -> None:
        """Called after an item is popped from a stack."""
        pass

    def scanned(
        self,
        token: Any,
        operands: Sequence[int],
        operators: Sequence[Any],
    ) -> None:
        """Called after each token is processed, with bottom-to-top snapshots."""
        pass


class LoggingObserver(ParseObserver):
    """Emits every hook as a structlog debug event."""

    def __init__(self, log=None):
        self.log = log or logger

    def pushed(self, stack_name: str, item: Any) -> None:
        self.log.debug("Pushed", stack=stack_name, item=_describe(item))

    def popped(self, stack_name: str, item: Any) -> None:
        self.log.debug("Popped", stack=stack_name, item=_describe(item))

    def scanned(self, token, operands, operators) -> None:
        self.log.debug(
            "Scanned token",
            token=str(token),
            operands=[loggable(value) for value in operands],
            operators=[_describe(op) for op in operators],
        )


def _describe(item: Any) -> Any:
    # Operators log as their symbol, operands as themselves
    return loggable(getattr(item, "symbol", item))
