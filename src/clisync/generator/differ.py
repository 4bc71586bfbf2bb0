"""Compare the live SDK model with the manifest.

* :func:`diff_services` -- methods present live but missing from the
  manifest (the *delta* that gets generated).
* :func:`find_removed_methods` -- manifest records whose method is gone
  from the SDK. Advisory only; nothing is ever deleted automatically.
* :func:`filter_services` -- the live methods a manifest authorizes, used
  when regenerating everything the manifest lists.

A delta is a ``{service_name: [Method, ...]}`` mapping in live order, with
services that contribute no methods left out.
"""

from __future__ import annotations

from clisync.generator.manifest import Manifest
from clisync.models import Method, Service


def diff_services(services: list[Service], manifest: Manifest) -> dict[str, list[Method]]:
    """Return the live methods that the manifest does not know about."""
    delta: dict[str, list[Method]] = {}
    for service in services:
        new_methods = [
            method for method in service.methods
            if not manifest.has_method(service.name, method.name)
        ]
        if new_methods:
            delta.setdefault(service.name, []).extend(new_methods)
    return delta


def find_removed_methods(services: list[Service], manifest: Manifest) -> dict[str, list[str]]:
    """Return manifest method names that no longer exist in the live model.

    A service that disappeared entirely reports all of its recorded methods.
    """
    live: dict[str, set[str]] = {}
    for service in services:
        live.setdefault(service.name, set()).update(m.name for m in service.methods)

    removed: dict[str, list[str]] = {}
    for service_name, entry in manifest.services.items():
        known = live.get(service_name, set())
        missing = [record.name for record in entry.methods if record.name not in known]
        if missing:
            removed[service_name] = missing
    return removed


def filter_services(services: list[Service], allowed: set[str]) -> dict[str, list[Method]]:
    """Keep only the live methods whose ``"Service.Method"`` key is in *allowed*."""
    selected: dict[str, list[Method]] = {}
    for service in services:
        methods = [m for m in service.methods if f"{service.name}.{m.name}" in allowed]
        if methods:
            selected.setdefault(service.name, []).extend(methods)
    return selected


def count_methods(delta: dict[str, list[Method]]) -> int:
    return sum(len(methods) for methods in delta.values())
