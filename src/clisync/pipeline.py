"""The scan -> chain -> diff -> generate -> persist sequence.

Each public function implements one generator command on top of the
parser and generator packages, and returns a small report for the CLI
layer to print:

* :func:`update_manifest` -- record new SDK methods without generating.
* :func:`generate` -- regenerate everything the manifest marks as
  generated (the manifest is read-only here).
* :func:`sync` -- generate the delta, then record it.
* :func:`status` -- new and removed methods, without writing anything.

Runs are single-threaded and one-shot. The manifest is loaded once,
changed in memory, and saved last: when a binding or the catalog cannot be
written, :class:`~clisync.exceptions.GenerationError` propagates before
the save and the previous manifest stays on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from clisync.config import resolve_sdk_path
from clisync.exceptions import SourceLocationError
from clisync.generator import (
    Manifest,
    diff_services,
    filter_services,
    find_removed_methods,
    generate_catalog,
    generate_commands,
    load_or_new,
)
from clisync.generator.differ import count_methods
from clisync.models import GeneratorConfig, Method, ParsedStruct, Service
from clisync.output import debug, info, success, warning
from clisync.parser import detect_chains, extract_model


@dataclass
class ScanResult:
    """The live SDK model of one run."""

    sdk_path: Path
    services: list[Service]
    structs: dict[str, ParsedStruct]


@dataclass
class UpdateReport:
    added: int = 0
    names_filled: int = 0
    removed: dict[str, list[str]] = field(default_factory=dict)
    delta: dict[str, list[Method]] = field(default_factory=dict)


@dataclass
class GenerateReport:
    bindings: list[Path] = field(default_factory=list)
    catalog: Optional[Path] = None
    methods: int = 0
    from_manifest: bool = False


@dataclass
class StatusReport:
    delta: dict[str, list[Method]] = field(default_factory=dict)
    removed: dict[str, list[str]] = field(default_factory=dict)


def scan(config: GeneratorConfig) -> ScanResult:
    """Extract the live model from the configured SDK and detect chains.

    Raises:
        SourceLocationError: If the SDK location is missing or unreadable.
        SourceParseError: If an SDK file is malformed.
    """
    sdk_path = resolve_sdk_path(config.sdk_path)
    info(f"Parsing SDK at: {sdk_path}")
    services, structs = extract_model(sdk_path, config.exclude, config.conventions)
    detect_chains(services, config.conventions)
    info(f"Found {len(services)} services")
    debug(f"Collected {len(structs)} struct definitions")
    return ScanResult(sdk_path=sdk_path, services=services, structs=structs)


def _load_manifest(config: GeneratorConfig) -> Manifest:
    manifest, existed = load_or_new(config.manifest_path, config.sdk_version)
    if not existed:
        info("No existing manifest found, creating new one")
    if config.sdk_version:
        manifest.sdk_version = config.sdk_version
    return manifest


def _warn_removed(removed: dict[str, list[str]]) -> None:
    for service_name, names in removed.items():
        for name in names:
            warning(f"{service_name}.{name} is in the manifest but no longer in the SDK")


def update_manifest(config: GeneratorConfig) -> UpdateReport:
    """Append every new SDK method to the manifest and save it.

    Nothing is written when the manifest is already up to date.
    """
    scanned = scan(config)
    manifest = _load_manifest(config)
    report = UpdateReport(
        delta=diff_services(scanned.services, manifest),
        removed=find_removed_methods(scanned.services, manifest),
    )
    _warn_removed(report.removed)

    if not report.delta:
        info("Manifest already up to date")
        return report

    info(f"Adding {count_methods(report.delta)} new methods to manifest")
    report.added = manifest.add_services(scanned.services, config.conventions)
    report.names_filled = manifest.ensure_param_names(config.conventions)
    manifest.save(config.manifest_path)
    success("Manifest updated!")
    return report


def generate(config: GeneratorConfig) -> GenerateReport:
    """Generate bindings and the catalog for every generated manifest entry.

    The live SDK model is used when the SDK can be read, so that chains and
    struct expansion apply. Otherwise the manifest's own records are
    projected back into methods, with chains detected on that projection.

    Raises:
        ManifestNotFoundError: If there is no manifest.
        ManifestCorruptError: If the manifest cannot be used.
        GenerationError: If an output file cannot be written.
    """
    manifest = Manifest.load(config.manifest_path)
    report = GenerateReport()

    try:
        scanned = scan(config)
    except SourceLocationError as exc:
        warning(f"{exc}; generating from manifest records only")
        scanned = None

    if scanned is not None:
        methods = filter_services(scanned.services, manifest.methods_to_generate_set())
        structs = scanned.structs
    else:
        projected = manifest.methods_to_generate(config.conventions)
        services = [Service(name=name, methods=ms) for name, ms in projected.items()]
        detect_chains(services, config.conventions)
        methods = {service.name: service.methods for service in services}
        structs = {}
        report.from_manifest = True

    report.methods = count_methods(methods)
    if not methods:
        info("No methods marked for generation in manifest")
        return report

    info(f"Generating commands for {report.methods} methods across {len(methods)} services")
    report.bindings = generate_commands(methods, config.output_dir, structs, config.conventions)
    report.catalog = generate_catalog(
        methods, config.output_dir, manifest.sdk_version, config.conventions
    )
    success("Generation complete!")
    return report


def sync(config: GeneratorConfig) -> GenerateReport:
    """Generate bindings for new SDK methods, then record them in the manifest."""
    scanned = scan(config)
    manifest = _load_manifest(config)
    _warn_removed(find_removed_methods(scanned.services, manifest))

    delta = diff_services(scanned.services, manifest)
    report = GenerateReport(methods=count_methods(delta))
    if not delta:
        info("No new methods found")
        return report

    info(f"Found {report.methods} new methods across {len(delta)} services")
    report.bindings = generate_commands(delta, config.output_dir, scanned.structs, config.conventions)
    report.catalog = generate_catalog(
        delta, config.output_dir, manifest.sdk_version, config.conventions
    )

    manifest.add_services(scanned.services, config.conventions)
    manifest.ensure_param_names(config.conventions)
    manifest.save(config.manifest_path)
    success(f"Generated {len(report.bindings)} commands and updated the manifest")
    return report


def status(config: GeneratorConfig) -> StatusReport:
    """Compare the SDK with the manifest without writing anything."""
    scanned = scan(config)
    manifest, _ = load_or_new(config.manifest_path, config.sdk_version)
    return StatusReport(
        delta=diff_services(scanned.services, manifest),
        removed=find_removed_methods(scanned.services, manifest),
    )
