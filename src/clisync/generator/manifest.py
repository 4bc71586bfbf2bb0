"""Persisted registry of every SDK method clisync knows about.

The manifest is a TOML document::

    version = 1
    sdk_version = "v8.1.0"

    [[services.AppsService.methods]]
    name = "List"
    params = []
    returns = "[]*App"
    generated = true

It is the only state that survives between runs. A run loads it once,
appends newly discovered methods in memory, and writes it back atomically
at the end. Entries are never modified, reordered or removed: a method
that disappears from the SDK is only reported (see
:func:`~clisync.generator.differ.find_removed_methods`).

Older manifests stored ``params`` as a list of bare type strings. These
load transparently; :meth:`Manifest.ensure_param_names` then backfills
their names with the same inference the extractor uses.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Optional

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from clisync.config import atomic_write
from clisync.exceptions import GenerationError, ManifestCorruptError, ManifestNotFoundError
from clisync.models import (
    Conventions,
    ManifestMethod,
    ManifestParam,
    ManifestService,
    Method,
    Param,
    Return,
    Service,
)
from clisync.parser.extractor import infer_param_name
from clisync.parser.shapes import primary_return_type

MANIFEST_VERSION = 1


class Manifest(BaseModel):
    """Versioned mapping of service name to its known methods."""

    version: int = MANIFEST_VERSION
    sdk_version: str = ""
    services: dict[str, ManifestService] = Field(default_factory=dict)

    # --- Persistence ---

    @classmethod
    def load(cls, path: str | Path) -> Manifest:
        """Read a manifest from *path*.

        Raises:
            ManifestNotFoundError: If *path* does not exist. Callers usually
                start from :func:`new_manifest` instead.
            ManifestCorruptError: If the file exists but cannot be read,
                is not valid TOML, or does not have the manifest shape.
        """
        path = Path(path)
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except FileNotFoundError as exc:
            raise ManifestNotFoundError(f"Manifest not found: {path}") from exc
        except OSError as exc:
            raise ManifestCorruptError(f"Failed to read manifest {path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ManifestCorruptError(f"Failed to parse manifest {path}: {exc}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ManifestCorruptError(f"Invalid manifest {path}: {exc}") from exc

    def save(self, path: str | Path) -> None:
        """Write the full manifest to *path* atomically.

        Parameters are always written as structured name/type records.

        Raises:
            GenerationError: If the file cannot be written. The previous
                file, if any, is left untouched.
        """
        path = Path(path)
        document = tomli_w.dumps(self.model_dump(mode="json"))
        try:
            atomic_write(path, document)
        except OSError as exc:
            raise GenerationError(f"Failed to write manifest {path}: {exc}") from exc

    # --- Queries ---

    def has_method(self, service_name: str, method_name: str) -> bool:
        """Exact-name lookup; parameter and return types are not compared."""
        service = self.services.get(service_name)
        if service is None:
            return False
        return any(m.name == method_name for m in service.methods)

    def method_count(self) -> int:
        return sum(len(s.methods) for s in self.services.values())

    # --- Mutation (append-only) ---

    def add_services(
        self,
        services: list[Service],
        conventions: Optional[Conventions] = None,
    ) -> int:
        """Append every method of *services* not yet recorded.

        New records capture the parameters and the primary return type and
        are marked ``generated``. Existing records are left as they are.

        Returns:
            The number of records appended.
        """
        added = 0
        for service in services:
            entry = self.services.setdefault(service.name, ManifestService())
            for method in service.methods:
                if self.has_method(service.name, method.name):
                    continue
                entry.methods.append(
                    ManifestMethod(
                        name=method.name,
                        params=[ManifestParam(name=p.name, type=p.type) for p in method.params],
                        returns=primary_return_type(method, conventions),
                        generated=True,
                    )
                )
                added += 1
        return added

    def ensure_param_names(self, conventions: Optional[Conventions] = None) -> int:
        """Backfill blank parameter names from their type and position.

        Returns:
            The number of names filled in.
        """
        filled = 0
        for service in self.services.values():
            for method in service.methods:
                for position, param in enumerate(method.params):
                    if param.name.strip():
                        continue
                    param.name = infer_param_name(param.type, position, conventions)
                    filled += 1
        return filled

    # --- Projections ---

    def methods_to_generate(
        self,
        conventions: Optional[Conventions] = None,
    ) -> dict[str, list[Method]]:
        """Project ``generated`` records back into :class:`Method` objects.

        The failure return is synthesized last. Services without any
        generated method are omitted.
        """
        conv = conventions or Conventions()
        projected: dict[str, list[Method]] = {}
        for service_name, service in self.services.items():
            methods: list[Method] = []
            for record in service.methods:
                if not record.generated:
                    continue
                returns = [Return(type=record.returns)] if record.returns else []
                returns.append(Return(type=conv.failure_type, is_error=True))
                methods.append(
                    Method(
                        name=record.name,
                        params=[
                            Param(
                                name=p.name or infer_param_name(p.type, i, conv),
                                type=p.type,
                            )
                            for i, p in enumerate(record.params)
                        ],
                        returns=returns,
                        has_context=True,
                    )
                )
            if methods:
                projected[service_name] = methods
        return projected

    def methods_to_generate_set(self) -> set[str]:
        """``"Service.Method"`` keys of every generated record."""
        return {
            f"{service_name}.{record.name}"
            for service_name, service in self.services.items()
            for record in service.methods
            if record.generated
        }


def new_manifest(sdk_version: str = "") -> Manifest:
    """Return an empty manifest at the current format version."""
    return Manifest(version=MANIFEST_VERSION, sdk_version=sdk_version)


def load_or_new(path: str | Path, sdk_version: str = "") -> tuple[Manifest, bool]:
    """Load the manifest at *path*, or start an empty one if it is absent.

    Returns:
        ``(manifest, existed)``.

    Raises:
        ManifestCorruptError: If the file exists but cannot be used.
    """
    try:
        return Manifest.load(path), True
    except ManifestNotFoundError:
        return new_manifest(sdk_version), False
