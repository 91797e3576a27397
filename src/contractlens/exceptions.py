"""Exception hierarchy for contractlens.

All exceptions inherit from :class:`ContractLensError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`contractlens.exit_codes`.
The top-level error handler in :func:`contractlens.app.main` catches
``ContractLensError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Validation issues and breaking changes are *not* exceptions: they are data
returned by the engine. Only a document that cannot be parsed at all is
fatal for that document.

Subclass hierarchy::

    ContractLensError (exit 1)
    +-- ParseError          (exit 7)
    +-- SourceError         (exit 8)
    +-- ConfigError         (exit 1)
"""

from contractlens.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_SOURCE_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class ContractLensError(Exception):
    """Base exception for all contractlens errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`contractlens.exit_codes`. The entry point catches
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


class ParseError(ContractLensError):
    """Raised when a byte stream is not well-formed YAML/JSON or is not an API spec.

    A document without an ``openapi`` or ``swagger`` marker at its root, or
    with an internal ``$ref`` that points nowhere, is rejected the same way
    as a syntax error.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR


class SourceError(ContractLensError):
    """Raised when a document cannot be obtained from a file, stdin or URL."""

    exit_code = EXIT_SOURCE_ERROR


class ConfigError(ContractLensError):
    """Raised for configuration problems (invalid JSON, values failing validation)."""

    exit_code = EXIT_GENERIC_FAILURE
