"""Terminal output for the ``riotauth`` commands.

Records (credentials, the saved-session summary, the config dump) go to
stdout; every human-facing notice goes to stderr so that
``riotauth --json token | jq -r .access_token`` stays clean.

Records render as a Rich table on an interactive terminal and as
``key<TAB>value`` lines when piped.  ``--json`` forces a JSON object.
Colour is off under ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.

The command callback installs one :class:`OutputManager` with
:func:`set_output`; commands call the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """How records are rendered.  ``AUTO`` picks ``RICH`` for a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _stdout_is_terminal() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _colour_disabled_by_env() -> bool:
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class OutputManager:
    """Render records on stdout and notices on stderr.

    Args:
        format: Record format; ``AUTO`` is resolved at construction.
        no_color: Strip colour and markup.
        quiet: Drop informational notices.  Errors are always shown.
        force_color: Keep colour on even when stdout is not a terminal or
            ``NO_COLOR`` is set.  Ignored when *no_color* is given.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        force_color: bool = False,
    ) -> None:
        force_color = force_color and not no_color
        self._no_color = no_color or (not force_color and _colour_disabled_by_env())
        self._quiet = quiet
        if format is OutputFormat.AUTO:
            use_rich = (force_color or _stdout_is_terminal()) and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format
        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format is OutputFormat.RICH,
        )
        self._notices = Console(
            file=sys.stderr,
            stderr=True,
            no_color=self._no_color,
            force_terminal=force_color or None,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def no_color(self) -> bool:
        return self._no_color

    # stdout

    def format_record(self, data: dict[str, Any], title: Optional[str] = None) -> None:
        """Print one flat record in the active format."""
        if self._format is OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False))
            return
        if self._format is OutputFormat.PLAIN:
            self.print_data("\n".join(f"{k}\t{_cell(v)}" for k, v in data.items()))
            return
        table = Table(title=title, header_style="bold cyan")
        table.add_column("Field")
        table.add_column("Value", overflow="fold")
        for key, value in data.items():
            table.add_row(key, _cell(value))
        self._console.print(table)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # stderr

    def _notice(self, message: str, markup: str, prefix: str = "", always: bool = False) -> None:
        if self._quiet and not always:
            return
        if prefix:
            message = f"{prefix} {message}" if self._no_color else f"{markup}{prefix}[/] {message}"
        elif markup and not self._no_color:
            message = f"{markup}{message}[/]"
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._notices.print(message)

    def info(self, message: str) -> None:
        self._notice(message, "")

    def success(self, message: str) -> None:
        self._notice(message, "[green]")

    def suggest(self, message: str) -> None:
        self._notice(message, "[dim]")

    def error(self, message: str) -> None:
        self._notice(message, "[bold red]", prefix="Error:", always=True)


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_record(data: dict[str, Any], title: Optional[str] = None) -> None:
    get_output().format_record(data, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)
