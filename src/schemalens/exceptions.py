"""Exception hierarchy for schemalens.

All exceptions inherit from :class:`SchemalensError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`schemalens.exit_codes`.
The top-level error handler in :func:`schemalens.app.main` catches
``SchemalensError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The schema pipeline itself never raises for malformed schemas -- it
degrades to neutral defaults and sentinels.  The only pipeline condition
surfaced as an error is :class:`EmptyDocumentError`.

Subclass hierarchy::

    SchemalensError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- SpecParseError      (exit 7)
    +-- EmptyDocumentError  (exit 8)
    +-- ConfigError         (exit 1)
"""

from schemalens.exit_codes import (
    EXIT_EMPTY_DOCUMENT,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
)


class SchemalensError(Exception):
    """Base exception for all schemalens errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`schemalens.exit_codes`. The entry point catches
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


class InvalidUsageError(SchemalensError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(SchemalensError):
    """Raised when a named operation or component schema is not in the document."""

    exit_code = EXIT_NOT_FOUND


class SpecParseError(SchemalensError):
    """Raised when a document cannot be loaded, parsed, or fails version validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class EmptyDocumentError(SchemalensError):
    """Raised when a document has no ``paths`` or yields zero operations."""

    exit_code = EXIT_EMPTY_DOCUMENT


class ConfigError(SchemalensError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
