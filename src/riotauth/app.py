"""Typer application and CLI entry point for riotauth.

This module wires together the top-level Typer application and registers
the built-in commands (``token``, ``status``, ``logout``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from riotauth import __version__
from riotauth.commands.config import config_app
from riotauth.commands.session import logout_command, status_command, token_command
from riotauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="riotauth",
    help="Keep a Riot Games session alive and hand out fresh credentials.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("token")(token_command)
app.command("status")(status_command)
app.command("logout")(logout_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"riotauth {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, no_color: bool) -> None:
    """Route the package's log records to stderr through Rich."""
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("riotauth")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
    store: Optional[str] = typer.Option(
        None, "--store", help="Session store file (overrides RIOTAUTH_STORE)."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~riotauth.output.OutputManager` and
    logging, and stores shared options in ``ctx.obj``.  Output flags
    override the ``output`` section of the global config.
    """
    from riotauth.config import load_global_config
    from riotauth.exceptions import ConfigError
    from riotauth.models import OutputConfig
    from riotauth.output import OutputFormat, OutputManager, set_output

    try:
        defaults = load_global_config().output
    except ConfigError:
        # The command itself reports the broken file.
        defaults = OutputConfig()

    fmt = OutputFormat(defaults.format)
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color or defaults.color == "never",
        quiet=quiet,
        force_color=defaults.color == "always",
    )
    set_output(output)
    _configure_logging(verbose, output.no_color)

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["store"] = store


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from riotauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``riotauth`` console script.

    :class:`~riotauth.exceptions.RiotAuthError` instances cause a clean
    exit with the error's ``exit_code``.  All other exceptions produce a
    crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from riotauth.exceptions import RiotAuthError
        from riotauth.output import error

        if isinstance(exc, RiotAuthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
