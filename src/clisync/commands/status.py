"""``clisync status`` -- compare the SDK with the manifest without writing."""

from __future__ import annotations

from typing import Optional

import typer

from clisync.commands import MANIFEST_HELP, SDK_PATH_HELP, load_config, run_step
from clisync.output import get_output, info, suggest


def status_command(
    sdk_path: Optional[str] = typer.Option(None, "--sdk-path", "-s", help=SDK_PATH_HELP),
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
) -> None:
    """List SDK methods missing from the manifest and manifest entries gone from the SDK.

    Example::

        clisync status
        clisync --json status
    """
    from clisync import pipeline

    config = load_config(sdk_path=sdk_path, manifest=manifest)
    report = run_step(lambda: pipeline.status(config))

    rows: list[list[str]] = []
    for service_name, methods in report.delta.items():
        for method in methods:
            state = "new (hidden)" if method.hidden else "new"
            rows.append([service_name, method.name, state])
    for service_name, names in report.removed.items():
        for name in names:
            rows.append([service_name, name, "removed"])

    if not rows:
        info("Manifest is in sync with the SDK")
        return

    get_output().print_table(["Service", "Method", "Status"], rows, title="SDK changes")
    if report.delta:
        suggest("Run: clisync sync")
