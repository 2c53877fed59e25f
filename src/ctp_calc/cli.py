"""
Command-line interface for CTP Calc.

Provides commands for:
- Running the CTP line-protocol server
- Running the HTTP API
- Evaluating expressions locally or against a server
- An interactive read-evaluate loop
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ctp_calc.config import load_settings
from ctp_calc.logs import configure_logging
from ctp_calc.models import ParseOutcome, ProtocolError
from ctp_calc.observers import LoggingObserver
from ctp_calc.parser import evaluate

app = typer.Typer(
    name="ctp",
    help="CTP Calc - integer expression evaluator and line-protocol server",
    add_completion=False,
)

console = Console()


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Log every stack operation"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
):
    """Start the CTP line-protocol server."""
    from ctp_calc.server import CalcServer

    cfg = load_settings(config, host=host, port=port, debug=debug or None)
    configure_logging(cfg.effective_log_level, cfg.log_json)

    server = CalcServer(
        host=cfg.host,
        port=cfg.port,
        max_request_bytes=cfg.max_request_bytes,
        read_timeout=cfg.read_timeout,
        backlog=cfg.backlog,
        observer=LoggingObserver() if cfg.debug else None,
    )

    console.print(f"[bold green]Starting CTP server on {cfg.host}:{cfg.port}[/]")
    try:
        asyncio.run(server.serve_forever())
    except OSError as e:
        console.print(f"[red]Unable to start server: {escape(str(e))}[/]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Server stopped[/]")


@app.command()
def api(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
):
    """Start the HTTP API server."""
    import uvicorn

    cfg = load_settings(config, api_host=host, api_port=port)
    configure_logging(cfg.effective_log_level, cfg.log_json)

    console.print(f"[bold green]Starting CTP Calc API on {cfg.api_host}:{cfg.api_port}[/]")

    uvicorn.run(
        "ctp_calc.api:app",
        host=cfg.api_host,
        port=cfg.api_port,
        reload=reload,
    )


# =============================================================================
# Evaluation Commands
# =============================================================================

@app.command("eval")
def eval_command(
    expression: str = typer.Argument(..., help="Expression to evaluate"),
    trace: bool = typer.Option(False, "--trace", "-t", help="Log stack operations"),
):
    """Evaluate an expression locally."""
    observer = None
    if trace:
        configure_logging("DEBUG")
        observer = LoggingObserver()

    outcome = evaluate(expression, observer)
    _print_outcome(outcome, label="Status")
    if not outcome.ok:
        raise typer.Exit(1)


@app.command()
def send(
    server: str = typer.Option(..., "--server", "-s", help="Server hostname"),
    port: int = typer.Option(..., "--port", "-p", help="Server port"),
    expr: str = typer.Option(..., "--expr", "-e", help="Expression to evaluate"),
    timeout: float = typer.Option(10.0, "--timeout", help="Seconds to wait for the server"),
):
    """Send an expression to a CTP server."""
    from ctp_calc.client import send_expression

    console.print(f"Request: {escape(expr)}")
    try:
        outcome = asyncio.run(send_expression(server, port, expr, timeout))
    except asyncio.TimeoutError:
        console.print(f"[red]Timed out after {timeout}s[/]")
        raise typer.Exit(1)
    except ProtocolError as e:
        console.print(f"[red]Invalid response: {escape(str(e))}[/]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Unable to connect: {escape(str(e))}[/]")
        raise typer.Exit(1)

    _print_outcome(outcome, label="Status Code")


@app.command()
def repl():
    """Evaluate expressions from stdin, one per line; a blank line exits."""
    for line in sys.stdin:
        expression = line.rstrip("\r\n")
        if not expression:
            break

        outcome = evaluate(expression)
        if outcome.ok:
            console.print(f"{escape(expression)} = {outcome.result_text}")
        else:
            console.print(outcome.status.render())


# =============================================================================
# Helpers
# =============================================================================

def _print_outcome(outcome: ParseOutcome, label: str) -> None:
    """Print an outcome as Status/Result lines."""
    color = "green" if outcome.ok else "red"
    console.print(f"{label}: [{color}]{outcome.status.render()}[/]")
    if outcome.ok:
        console.print(f"Result: {outcome.result_text}")


if __name__ == "__main__":
    app()
