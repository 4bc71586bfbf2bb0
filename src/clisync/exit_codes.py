"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~clisync.exceptions.ClisyncError` subclass.
CI jobs that run ``clisync sync`` can inspect the exit code to tell a
broken SDK checkout from a corrupt manifest without parsing stderr.

Example::

    $ clisync update-manifest --sdk-path ./missing
    $ echo $?
    7   # EXIT_SOURCE_ERROR -- the SDK location could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SOURCE_ERROR = 7
"""The library definitions could not be located, read, or parsed."""

EXIT_MANIFEST_ERROR = 8
"""The manifest file is missing where required, or is corrupt."""

EXIT_GENERATION_ERROR = 9
"""Generated bindings or the command catalog could not be written."""
