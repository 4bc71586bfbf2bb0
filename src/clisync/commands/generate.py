"""``clisync generate`` and ``clisync sync``.

``generate`` treats the manifest as read-only and (re)writes a binding for
every method it marks as generated. ``sync`` runs the whole pipeline:
scan, write bindings for the new methods only, then record them in the
manifest.
"""

from __future__ import annotations

from typing import Optional

import typer

from clisync.commands import MANIFEST_HELP, OUTPUT_HELP, SDK_PATH_HELP, load_config, run_step
from clisync.output import OutputFormat, get_output, suggest
from clisync.pipeline import GenerateReport


def _print_report(report: GenerateReport) -> None:
    output = get_output()
    if report.methods or output.format == OutputFormat.JSON:
        output.print_report({
            "methods": report.methods,
            "bindings": [str(p) for p in report.bindings],
            "catalog": str(report.catalog) if report.catalog else None,
        })


def generate_command(
    sdk_path: Optional[str] = typer.Option(None, "--sdk-path", "-s", help=SDK_PATH_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
) -> None:
    """Generate CLI commands from the manifest.

    The manifest is not modified. When the SDK can be read, its live model
    supplies chained parameters and options-struct expansion.

    Example::

        clisync generate --output generated/commands
    """
    from clisync import pipeline

    config = load_config(sdk_path=sdk_path, output=output, manifest=manifest)
    report = run_step(lambda: pipeline.generate(config))
    _print_report(report)


def sync_command(
    sdk_path: Optional[str] = typer.Option(None, "--sdk-path", "-s", help=SDK_PATH_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help=OUTPUT_HELP),
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
) -> None:
    """Generate commands for new SDK methods and record them in the manifest.

    Nothing is written when there are no new methods. If an output file
    cannot be written the manifest is left unchanged.

    Example::

        clisync sync --sdk-path ../go-scalingo
    """
    from clisync import pipeline

    config = load_config(sdk_path=sdk_path, output=output, manifest=manifest)
    report = run_step(lambda: pipeline.sync(config))
    _print_report(report)
    if report.bindings:
        suggest(f"Mount the commands with register_all() from {config.output_dir}/__init__.py")
