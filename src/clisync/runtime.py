"""Support code imported by generated bindings.

Every binding module written by :mod:`clisync.generator.commands` imports
this module and nothing else from clisync. It provides:

* :class:`Flag` -- the flag descriptor listed in a binding's ``FLAGS``.
* Client resolution -- :func:`new_client` builds the SDK client from the
  factory installed with :func:`set_client_factory` or named by the
  ``client_factory`` config key (``"package.module:attribute"``).
* Calling -- :func:`call` invokes an SDK method by name, passing a
  :class:`CallContext` first when the Go method takes a context.
  :func:`parse_json` and :func:`build_struct` rebuild complex arguments
  from flag values.
* Execution -- :func:`execute` runs a binding's ``run`` entry point and
  renders the result according to the binding's renderer hint.
* Registration -- :func:`register_package` mounts every binding module of
  a package on a Typer app, grouped by service.

SDK methods returning several values (for instance a list and pagination
metadata) are expected to return a tuple in the same order.
"""

from __future__ import annotations

import importlib
import json
import pkgutil
from dataclasses import dataclass
from typing import Any, Callable, Optional

import click
import typer

from clisync.config import resolve_config
from clisync.exceptions import ClisyncError, ConfigError, InvalidUsageError, RuntimeBindingError
from clisync.models import RendererHint
from clisync.output import debug, info
from clisync.render import (
    RenderFormat,
    SUCCESS_MESSAGE,
    render_error,
    render_passthrough,
    render_result,
    render_success,
)


OUTPUT_FORMATS = tuple(f.value for f in RenderFormat)


@dataclass(frozen=True)
class Flag:
    """A CLI flag of a generated binding."""

    name: str
    type: str = "str"
    required: bool = False


@dataclass
class CallContext:
    """Stand-in for the Go ``context.Context`` argument.

    Passed as the first positional argument to SDK methods that take one.
    """

    timeout: Optional[float] = None


# ------------------------------------------------------------------ #
# Client resolution
# ------------------------------------------------------------------ #

_client_factory: Optional[Callable[[], Any]] = None


def set_client_factory(factory: Optional[Callable[[], Any]]) -> None:
    """Install the callable that builds SDK clients (``None`` to clear)."""
    global _client_factory
    _client_factory = factory


def load_factory(import_string: str) -> Callable[[], Any]:
    """Resolve a ``"module:attribute"`` import string to a callable.

    Raises:
        ConfigError: If the string is malformed, the module cannot be
            imported, or the attribute is missing or not callable.
    """
    module_name, sep, attr = import_string.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(
            f"Invalid client_factory '{import_string}': expected 'module:attribute'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import client factory module '{module_name}': {exc}") from exc

    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise ConfigError(f"Client factory '{import_string}' not found")
    if not callable(target):
        raise ConfigError(f"Client factory '{import_string}' is not callable")
    return target


def new_client() -> Any:
    """Build an SDK client.

    Raises:
        RuntimeBindingError: If no client factory is installed or
            configured.
    """
    factory = _client_factory
    if factory is None:
        import_string = resolve_config().client_factory
        if not import_string:
            raise RuntimeBindingError(
                "No SDK client configured: set 'client_factory' in clisync.json "
                "or call clisync.runtime.set_client_factory()"
            )
        factory = load_factory(import_string)
    return factory()


# ------------------------------------------------------------------ #
# Calling
# ------------------------------------------------------------------ #


def call(client: Any, method_name: str, *args: Any, context: bool = False) -> Any:
    """Invoke ``client.<method_name>(*args)``.

    Raises:
        RuntimeBindingError: If the client has no such callable.
    """
    fn = getattr(client, method_name, None)
    if fn is None or not callable(fn):
        raise RuntimeBindingError(
            f"SDK client {type(client).__name__} has no method '{method_name}'"
        )
    if context:
        args = (CallContext(),) + args
    debug(f"Calling {method_name} with {len(args)} arguments")
    return fn(*args)


def parse_json(value: Optional[str], flag: str = "") -> Any:
    """Decode a JSON flag value; ``None`` stays ``None``.

    Raises:
        InvalidUsageError: If *value* is not valid JSON.
    """
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        where = f" for --{flag}" if flag else ""
        raise InvalidUsageError(f"Invalid JSON value{where}: {exc}") from exc


def build_struct(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields from an options mapping."""
    return {key: value for key, value in fields.items() if value is not None}


def report_pagination(meta: Any) -> None:
    """Print pagination metadata to stderr."""
    if meta is None:
        return
    if isinstance(meta, dict):
        current = meta.get("current_page")
        total = meta.get("total_pages")
    else:
        current = getattr(meta, "current_page", getattr(meta, "CurrentPage", None))
        total = getattr(meta, "total_pages", getattr(meta, "TotalPages", None))
    if current is not None and total is not None:
        info(f"Page {current}/{total}")


# ------------------------------------------------------------------ #
# Execution
# ------------------------------------------------------------------ #


def execute(run: Callable[..., Any], renderer: str, output_format: str, **inputs: Any) -> None:
    """Run a binding entry point and print its rendered result.

    Failures of the SDK call, and clisync errors such as a missing client,
    are rendered to stderr and end the command with a non-zero exit code.

    Raises:
        click.BadParameter: If *output_format* is not a known format.
        typer.Exit: On any failure.
    """
    if output_format not in OUTPUT_FORMATS:
        raise click.BadParameter(
            f"{output_format!r} is not one of {', '.join(OUTPUT_FORMATS)}.",
            param_hint="'--output'",
        )
    try:
        result = run(**inputs)
        text = _render(result, RendererHint(renderer), output_format)
    except ClisyncError as exc:
        typer.echo(render_error(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    except Exception as exc:
        # Failure channel of the SDK method.
        typer.echo(render_error(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(text)


def _render(result: Any, renderer: RendererHint, output_format: str) -> str:
    if output_format == "json":
        return render_result(result, output_format)
    if renderer == RendererHint.SUCCESS:
        return render_success(SUCCESS_MESSAGE)
    if renderer == RendererHint.PASSTHROUGH:
        return render_passthrough(result)
    return render_result(result, output_format)


# ------------------------------------------------------------------ #
# Registration
# ------------------------------------------------------------------ #


def register_package(app: typer.Typer, package_name: str) -> int:
    """Mount every binding module of *package_name* on *app*.

    Bindings are grouped into one sub-app per ``GROUP``. Modules without a
    ``command`` callback are ignored.

    Returns:
        The number of commands registered.
    """
    package = importlib.import_module(package_name)
    groups: dict[str, typer.Typer] = {}
    count = 0
    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        module = importlib.import_module(f"{package_name}.{module_info.name}")
        callback = getattr(module, "command", None)
        group_name = getattr(module, "GROUP", None)
        if callback is None or group_name is None:
            continue
        group = groups.get(group_name)
        if group is None:
            group = typer.Typer(help=f"{group_name} commands", no_args_is_help=True)
            groups[group_name] = group
            app.add_typer(group, name=group_name)
        group.command(name=module.COMMAND, help=getattr(module, "HELP", None))(callback)
        count += 1
    debug(f"Registered {count} commands from {package_name}")
    return count
