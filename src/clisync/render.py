"""Render SDK results for generated commands.

Generated bindings never format output themselves; they hand the value
returned by the SDK to this module:

* :func:`render_result` -- ``table``, ``detail`` or ``json`` text for any
  value (dicts, Pydantic models, dataclasses, plain objects, and lists of
  those).
* :func:`render_passthrough` -- the body of a raw HTTP response, or a
  status summary when the body is empty.
* :func:`render_error`, :func:`render_success`, :func:`render_http_status`
  -- one-line messages.

Everything returns a string; writing it to a stream is the caller's job.
Rich markup is only kept when stdout is a terminal and colour is enabled.
"""

from __future__ import annotations

import dataclasses
import datetime
import io
import json
import shutil
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from clisync.exceptions import ClisyncError
from clisync.output import _is_tty, _should_disable_color


class RenderFormat(str, Enum):
    """Output formats accepted by :func:`render_result`."""

    TABLE = "table"
    DETAIL = "detail"
    JSON = "json"


class RenderError(ClisyncError):
    """A result could not be rendered in the requested format."""


SUCCESS_MESSAGE = "Operation completed successfully"
_MAX_INLINE_ITEMS = 5
_MAX_DEPTH = 2


def render_result(data: Any, format: RenderFormat | str = RenderFormat.TABLE) -> str:
    """Render *data* as text in *format*.

    ``None`` renders a success acknowledgement. In ``table`` format a
    single object falls back to the detail view, and in ``detail`` format a
    list falls back to the table.

    Raises:
        RenderError: If *format* is unknown or *data* cannot be serialised.
    """
    try:
        fmt = RenderFormat(format)
    except ValueError as exc:
        raise RenderError(f"Unknown output format: {format} (expected table, detail or json)") from exc

    if fmt == RenderFormat.JSON:
        try:
            return json.dumps(to_plain(data), indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as exc:
            raise RenderError(f"Failed to encode result as JSON: {exc}") from exc

    if data is None:
        return render_success(SUCCESS_MESSAGE)
    if isinstance(data, (list, tuple)):
        return _render_table(list(data))
    if _to_record(data) is not None:
        return _render_detail(data)
    return str(data)


def render_error(exc: BaseException) -> str:
    """Render an exception as a boxed error message.

    HTTP errors raised by :mod:`httpx` include the status and reason.
    """
    message = str(exc) or type(exc).__name__
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        message = f"{render_http_status(status, styled=False)}: {message}"
    body = Text.assemble(("Error", "bold red"), "\n", (message, "red"))
    return _to_text(Panel(body, border_style="red", expand=False))


def render_success(message: str) -> str:
    return _to_text(Text(f"✓ {message}", style="green"))


def render_http_status(code: int, styled: bool = True) -> str:
    """``HTTP 404 Not Found``, coloured by status class."""
    phrase = httpx.codes.get_reason_phrase(code)
    label = f"HTTP {code} {phrase}".rstrip()
    if not styled:
        return label
    if 200 <= code < 300:
        style = "green"
    elif 400 <= code < 500:
        style = "yellow"
    elif code >= 500:
        style = "red"
    else:
        style = "dim"
    return _to_text(Text(label, style=style))


def render_passthrough(response: Any) -> str:
    """Return the response body unmodified, or its status when the body is empty.

    Works with :class:`httpx.Response` and any object exposing
    ``content``/``text`` and ``status_code``.
    """
    if response is None:
        return render_success(SUCCESS_MESSAGE)
    body = getattr(response, "content", None)
    if body is None:
        body = getattr(response, "text", None)
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if body:
        return body
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return render_http_status(status)
    return render_success(SUCCESS_MESSAGE)


# ------------------------------------------------------------------ #
# Value conversion
# ------------------------------------------------------------------ #


def _to_record(value: Any) -> dict[str, Any] | None:
    """Return the public fields of an object-like *value*, or ``None``."""
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items()}
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    return None


def to_plain(value: Any) -> Any:
    """Convert *value* into JSON-compatible builtins, recursively."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple, set)):
        return [to_plain(v) for v in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    record = _to_record(value)
    if record is not None:
        return {k: to_plain(v) for k, v in record.items()}
    return str(value)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(
        value, (str, int, float, bool, Enum, datetime.date, datetime.datetime)
    )


def _format_value(value: Any, depth: int = 0) -> str:
    if depth > _MAX_DEPTH:
        return "..."
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, str):
        return value if value else "(empty)"
    if isinstance(value, (list, tuple, set)):
        items = list(value)
        if not items:
            return "(empty)"
        if len(items) > _MAX_INLINE_ITEMS:
            return f"[{len(items)} items]"
        return ", ".join(_format_value(v, depth + 1) for v in items)
    if isinstance(value, dict):
        return f"{{{len(value)} entries}}" if value else "(empty)"
    if _to_record(value) is not None:
        return f"<{type(value).__name__}>"
    return str(value)


# ------------------------------------------------------------------ #
# Views
# ------------------------------------------------------------------ #


def _render_table(rows: list[Any]) -> str:
    records = [r for r in (_to_record(row) for row in rows) if r is not None]
    if not rows:
        return _to_text(Text("No data to display", style="dim"))
    if not records:
        return "\n".join(_format_value(row) for row in rows)

    columns = [key for key, value in records[0].items() if _is_scalar(value)]
    table = Table(show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*(_format_value(record.get(column)) for column in columns))
    return _to_text(table)


def _render_detail(data: Any) -> str:
    record = _to_record(data) or {}
    title = None if isinstance(data, dict) else type(data).__name__
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    for key, value in record.items():
        grid.add_row(f"{key}:", _format_value(value))
    return _to_text(Panel(grid, title=title, expand=False))


def _to_text(renderable: Any) -> str:
    """Render a Rich object to a string for the current stdout."""
    buffer = io.StringIO()
    color = _is_tty() and not _should_disable_color()
    console = Console(
        file=buffer,
        force_terminal=color,
        no_color=not color,
        width=shutil.get_terminal_size((120, 24)).columns,
    )
    console.print(renderable)
    return buffer.getvalue().rstrip("\n")
