"""
Tests for the command-line interface.
"""

import socket

from typer.testing import CliRunner

from ctp_calc.cli import app
from ctp_calc.observers import LoggingObserver

runner = CliRunner()


class TestEvalCommand:
    """Test local evaluation."""

    def test_ok(self):
        result = runner.invoke(app, ["eval", "(2+2)*3"])
        assert result.exit_code == 0
        assert "Status: ok" in result.output
        assert "Result: 12" in result.output

    def test_leading_minus(self):
        result = runner.invoke(app, ["eval", "--", "-5+3"])
        assert result.exit_code == 0
        assert "Result: -2" in result.output

    def test_error_exits_nonzero(self):
        result = runner.invoke(app, ["eval", "10/0"])
        assert result.exit_code == 1
        assert "Status: invalid-expr" in result.output
        assert "Result" not in result.output

    def test_trace_uses_observer(self, monkeypatch, observer):
        monkeypatch.setattr("ctp_calc.cli.LoggingObserver", lambda: observer)
        result = runner.invoke(app, ["eval", "--trace", "1+2"])
        assert result.exit_code == 0
        assert "Result: 3" in result.output
        assert [step[0] for step in observer.steps] == ["1", "+", "2"]

    def test_trace_logs_stack_operations(self):
        result = runner.invoke(app, ["eval", "-t", "1+2"])
        assert result.exit_code == 0
        assert "Result: 3" in result.output

    def test_huge_result(self):
        result = runner.invoke(app, ["eval", "--trace", "9" * 5000])
        assert result.exit_code == 0
        assert "9" * 5000 in "".join(result.output.split())


class TestReplCommand:
    """Test the interactive loop."""

    def test_evaluates_until_blank_line(self):
        result = runner.invoke(app, ["repl"], input="2+2\n(1\n\n3\n")
        assert result.exit_code == 0
        assert "2+2 = 4" in result.output
        assert "mismatch" in result.output
        assert "3 = 3" not in result.output

    def test_stops_at_eof(self):
        result = runner.invoke(app, ["repl"], input="7*6\n")
        assert result.exit_code == 0
        assert "7*6 = 42" in result.output

    def test_huge_result(self):
        result = runner.invoke(app, ["repl"], input="9" * 3000 + "*" + "9" * 3000 + "\n")
        assert result.exit_code == 0
        assert "=" in result.output
        digits = "".join(result.output.split()).rpartition("=")[2]
        assert digits == str(10 ** 3000 - 2) + "0" * 2999 + "1"


class TestSendCommand:
    """Test the network client command."""

    def test_send(self, running_server):
        result = runner.invoke(
            app,
            ["send", "-s", "127.0.0.1", "-p", str(running_server.bound_port), "-e", "2*(3+4)"],
        )
        assert result.exit_code == 0
        assert "Request: 2*(3+4)" in result.output
        assert "Status Code: ok" in result.output
        assert "Result: 14" in result.output

    def test_send_error_status(self, running_server):
        result = runner.invoke(
            app,
            ["send", "--server", "127.0.0.1", "--port", str(running_server.bound_port), "--expr", "(1"],
        )
        assert result.exit_code == 0
        assert "Status Code: mismatch" in result.output

    def test_connection_failure(self):
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            port = sock.getsockname()[1]

        result = runner.invoke(app, ["send", "-s", "127.0.0.1", "-p", str(port), "-e", "1+1"])
        assert result.exit_code == 1
        assert "Unable to connect" in result.output


class TestServeCommand:
    """Test how the serve command builds its server."""

    @staticmethod
    def _capture_servers(monkeypatch) -> list:
        from ctp_calc.server import CalcServer

        servers = []

        async def fake_serve_forever(self):
            servers.append(self)

        monkeypatch.setattr(CalcServer, "serve_forever", fake_serve_forever)
        return servers

    def test_debug_attaches_logging_observer(self, monkeypatch):
        servers = self._capture_servers(monkeypatch)
        result = runner.invoke(app, ["serve", "--port", "0", "--debug"])
        assert result.exit_code == 0
        assert len(servers) == 1
        assert isinstance(servers[0].observer, LoggingObserver)
        assert servers[0].port == 0

    def test_no_observer_without_debug(self, monkeypatch):
        servers = self._capture_servers(monkeypatch)
        result = runner.invoke(app, ["serve", "--port", "0"])
        assert result.exit_code == 0
        assert servers[0].observer is None
