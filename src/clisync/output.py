"""Terminal output for clisync.

Two streams, following `clig.dev <https://clig.dev/>`_:

* **stdout** carries the results of a command: the ``status`` change table
  and the ``generate``/``sync`` report. Scripts read these with
  ``--json`` or ``--plain``.
* **stderr** carries pipeline progress, warnings, errors and next-step
  hints.

Rich markup is used only when stdout is a terminal and colour is allowed
(``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn it off).

:class:`OutputManager` holds the resolved preferences. The root callback
in :mod:`clisync.app` installs one with :func:`set_output`; pipeline code
calls the module-level :func:`info`, :func:`warning`, :func:`debug` and
friends.
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
    """How results are written to stdout.

    ``AUTO`` becomes ``RICH`` on a colour terminal and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Route clisync results to stdout and diagnostics to stderr.

    Args:
        format: Result format; ``AUTO`` is resolved from the terminal.
        no_color: Disable colour and markup on both streams.
        quiet: Drop progress, success and hint messages.
        verbose: Show ``debug`` messages (generated file paths, chain
            detection, skipped methods).
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Results (stdout)
    # ------------------------------------------------------------------ #

    def print_report(self, report: dict[str, Any]) -> None:
        """Print a summary such as the ``generate`` report.

        Values may be scalars or lists (the written binding paths). JSON
        mode dumps the mapping as is. Plain mode prints one
        ``key<TAB>value`` line per scalar and per list item. Rich mode
        prints a two-column grid.
        """
        if self._format == OutputFormat.JSON:
            self._write(json.dumps(report, indent=2, ensure_ascii=False, default=str))
            return

        if self._format == OutputFormat.PLAIN:
            for key, value in report.items():
                values = value if isinstance(value, list) else [value]
                for item in values:
                    self._write(f"{key}\t{'' if item is None else item}")
            return

        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold")
        grid.add_column()
        for key, value in report.items():
            if isinstance(value, list):
                shown = "\n".join(str(v) for v in value) or "-"
            else:
                shown = "-" if value is None else str(value)
            grid.add_row(key, shown)
        self._stdout.print(grid)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows like the ``status`` change list.

        JSON mode emits one object per row keyed by the lower-cased
        header (``{"service": ..., "method": ..., "status": ...}``).
        Plain mode emits tab-separated lines with a header line first.
        """
        if self._format == OutputFormat.JSON:
            keys = [h.lower().replace(" ", "_") for h in headers]
            records = [dict(zip(keys, row)) for row in rows]
            self._write(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self._write("\t".join(line))
        else:
            table = Table(title=title, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Warnings are shown even with ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Print a next step, e.g. ``Run: clisync sync``."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _write(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between runs."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
