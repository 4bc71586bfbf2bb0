"""Built-in CLI sub-commands for clisync.

Each module exports plain callback functions registered directly on the
root app by :func:`clisync.app.register_commands`:

* :mod:`~clisync.commands.manifest` -- ``update-manifest``: record new SDK
  methods in the manifest.
* :mod:`~clisync.commands.generate` -- ``generate`` (from the manifest)
  and ``sync`` (scan, generate the delta, record it).
* :mod:`~clisync.commands.status` -- ``status``: new and removed methods.

All of them resolve a :class:`~clisync.models.GeneratorConfig` from their
path options and hand it to :mod:`clisync.pipeline`. A
:class:`~clisync.exceptions.ClisyncError` is printed through the output
layer and ends the command with the error's exit code.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

import typer

from clisync.exceptions import ClisyncError
from clisync.models import GeneratorConfig
from clisync.output import error

T = TypeVar("T")

SDK_PATH_HELP = "Directory of the Go SDK package (defaults to the vendored copy)."
OUTPUT_HELP = "Directory receiving generated bindings and spec.toml."
MANIFEST_HELP = "Path of the manifest file."


def load_config(
    sdk_path: Optional[str] = None,
    output: Optional[str] = None,
    manifest: Optional[str] = None,
) -> GeneratorConfig:
    """Resolve configuration, exiting with the error's code on failure."""
    from clisync.config import resolve_config

    return run_step(lambda: resolve_config(sdk_path, output, manifest))


def run_step(step: Callable[[], T]) -> T:
    """Run a pipeline step, turning :class:`ClisyncError` into a clean exit.

    Raises:
        typer.Exit: With the error's exit code.
    """
    try:
        return step()
    except ClisyncError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
