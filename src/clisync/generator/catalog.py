"""Emit the declarative command catalog (``spec.toml``).

The catalog is write-only output for documentation and tooling: one
:class:`~clisync.models.CommandSpec` per new command, keyed by the
kebab-case command identifier::

    version = 1
    sdk_version = "v8.1.0"

    [commands.widgets-list]
    service = "WidgetsService"
    method = "List"
    use = "list"
    flags = []
    returns = "[]Widget"
    renderer = "table"

It is a pure projection of the delta and never reads or writes the
manifest.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import tomli_w

from clisync.config import atomic_write
from clisync.exceptions import GenerationError
from clisync.generator.naming import command_key, command_use, to_kebab_case
from clisync.models import CommandCatalog, CommandSpec, Conventions, Method
from clisync.parser.shapes import method_renderer, primary_return_type

CATALOG_FILENAME = "spec.toml"


def command_spec(
    service_name: str,
    method: Method,
    conventions: Optional[Conventions] = None,
) -> CommandSpec:
    """Describe the command generated for *method*.

    ``flags`` lists the kebab-cased name of every method parameter, in
    order. It describes the SDK call, not the generated command line:
    options structs and chained parameters keep their own name.
    """
    conv = conventions or Conventions()
    return CommandSpec(
        service=service_name,
        method=method.name,
        use=command_use(service_name, method.name, conv.service_suffix),
        flags=[to_kebab_case(param.name) for param in method.params],
        returns=primary_return_type(method, conv),
        renderer=method_renderer(method, conv),
    )


def build_catalog(
    delta: dict[str, list[Method]],
    sdk_version: str = "",
    conventions: Optional[Conventions] = None,
) -> CommandCatalog:
    """Build the catalog of every visible method in *delta*."""
    conv = conventions or Conventions()
    catalog = CommandCatalog(sdk_version=sdk_version)
    for service_name, methods in delta.items():
        for method in methods:
            if method.hidden:
                continue
            key = command_key(service_name, method.name, conv.service_suffix)
            catalog.commands[key] = command_spec(service_name, method, conv)
    return catalog


def generate_catalog(
    delta: dict[str, list[Method]],
    output_dir: str | Path,
    sdk_version: str = "",
    conventions: Optional[Conventions] = None,
) -> Path:
    """Write ``spec.toml`` for *delta* into *output_dir*.

    Raises:
        GenerationError: If the file cannot be written.
    """
    path = Path(output_dir) / CATALOG_FILENAME
    catalog = build_catalog(delta, sdk_version, conventions)
    try:
        atomic_write(path, tomli_w.dumps(catalog.model_dump(mode="json")))
    except OSError as exc:
        raise GenerationError(f"Failed to write {path}: {exc}") from exc
    return path
