"""Generator -- reconcile the live model with the manifest and emit commands.

This sub-package is the second half of the clisync pipeline: given the
service model produced by :mod:`clisync.parser`, it finds what is new,
writes Typer bindings and the command catalog, and records the result in
the manifest.

Typical usage::

    from clisync.generator import Manifest, diff_services, generate_catalog, generate_commands

    manifest = Manifest.load("manifest.toml")
    delta = diff_services(services, manifest)
    generate_commands(delta, "generated/commands", structs)
    generate_catalog(delta, "generated/commands", manifest.sdk_version)
    manifest.add_services(services)
    manifest.save("manifest.toml")

Sub-modules:

* :mod:`~clisync.generator.manifest` -- the persisted, append-only
  registry of known methods.
* :mod:`~clisync.generator.differ` -- new and removed methods.
* :mod:`~clisync.generator.naming` -- kebab-case and identifier
  conversions.
* :mod:`~clisync.generator.param_mapper` -- parameters to flags and call
  arguments.
* :mod:`~clisync.generator.commands` -- binding source generation.
* :mod:`~clisync.generator.catalog` -- ``spec.toml`` generation.
"""

from clisync.generator.catalog import generate_catalog
from clisync.generator.commands import generate_commands
from clisync.generator.differ import diff_services, filter_services, find_removed_methods
from clisync.generator.manifest import Manifest, load_or_new, new_manifest

__all__ = [
    "Manifest",
    "new_manifest",
    "load_or_new",
    "diff_services",
    "find_removed_methods",
    "filter_services",
    "generate_commands",
    "generate_catalog",
]
