"""Exception hierarchy for clisync.

All exceptions inherit from :class:`ClisyncError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clisync.exit_codes`.
The top-level error handler in :func:`clisync.app.main` catches
``ClisyncError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ClisyncError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- SourceLocationError      (exit 7)
    +-- SourceParseError         (exit 7)
    +-- ManifestError            (exit 8)
    |   +-- ManifestNotFoundError
    |   +-- ManifestCorruptError
    +-- GenerationError          (exit 9)
    +-- ConfigError              (exit 1)
    +-- RuntimeBindingError      (exit 1)
"""

from clisync.exit_codes import (
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
    EXIT_SOURCE_ERROR,
)


class ClisyncError(Exception):
    """Base exception for all clisync errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`clisync.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ClisyncError):
    """Raised for invalid CLI arguments or option combinations."""

    exit_code = EXIT_INVALID_USAGE


class SourceLocationError(ClisyncError):
    """Raised when the library location is missing or cannot be read."""

    exit_code = EXIT_SOURCE_ERROR


class SourceParseError(ClisyncError):
    """Raised when a library definition file contains malformed source.

    No partial model is returned when this is raised.
    """

    exit_code = EXIT_SOURCE_ERROR


class ManifestError(ClisyncError):
    """Base class for manifest load failures."""

    exit_code = EXIT_MANIFEST_ERROR


class ManifestNotFoundError(ManifestError):
    """Raised when no manifest file exists at the requested path.

    Callers that scan a library usually recover by starting from an empty
    :class:`~clisync.generator.manifest.Manifest`.
    """


class ManifestCorruptError(ManifestError):
    """Raised when a manifest file exists but cannot be read or decoded."""


class GenerationError(ClisyncError):
    """Raised when a binding or the command catalog cannot be written."""

    exit_code = EXIT_GENERATION_ERROR


class ConfigError(ClisyncError):
    """Raised for configuration problems (invalid JSON, bad values, bad import strings)."""

    exit_code = EXIT_GENERIC_FAILURE


class RuntimeBindingError(ClisyncError):
    """Raised by generated bindings when no usable client is available."""

    exit_code = EXIT_GENERIC_FAILURE
