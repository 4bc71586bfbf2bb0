"""``clisync update-manifest`` -- record new SDK methods without generating code."""

from __future__ import annotations

from typing import Optional

import typer

from clisync.commands import MANIFEST_HELP, SDK_PATH_HELP, load_config, run_step
from clisync.output import suggest


def update_manifest_command(
    sdk_path: Optional[str] = typer.Option(None, "--sdk-path", "-s", help=SDK_PATH_HELP),
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
) -> None:
    """Scan the SDK and add missing methods to the manifest.

    Existing entries are never changed. Methods that disappeared from the
    SDK are reported as warnings and kept.

    Example::

        clisync update-manifest --sdk-path vendor/github.com/Scalingo/go-scalingo/v8
    """
    from clisync import pipeline

    config = load_config(sdk_path=sdk_path, manifest=manifest)
    report = run_step(lambda: pipeline.update_manifest(config))
    if report.added:
        suggest("Run: clisync generate")
