"""clisync -- keep a generated CLI in sync with an evolving Go SDK.

This package introspects the service interfaces exposed by a Go SDK, compares
them against a persisted manifest of previously generated commands, and
emits Typer command bindings plus a declarative command catalog for every
newly discovered method.

Typical workflow::

    clisync update-manifest --sdk-path vendor/github.com/acme/sdk
    clisync generate --output generated/commands

or, in one step::

    clisync sync --sdk-path vendor/github.com/acme/sdk

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    pipeline: The scan -> diff -> generate -> persist sequence.
    runtime: Support code imported by generated bindings.
    render: Result rendering used by generated bindings.
"""

__version__ = "0.3.0"
