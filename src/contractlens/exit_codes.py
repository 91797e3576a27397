"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific outcome category and is referenced by the
corresponding :class:`~contractlens.exceptions.ContractLensError` subclass
or by the gate logic of the CLI commands. CI scripts can inspect the exit
code to tell a broken document from a failed gate without parsing stderr.

Example::

    $ contractlens diff v1.yaml v2.yaml
    $ echo $?
    9   # EXIT_GATE_FAILED -- critical breaking changes were detected
"""

EXIT_SUCCESS = 0
"""The command completed successfully and every gate passed."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or options."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API specification could not be parsed."""

EXIT_SOURCE_ERROR = 8
"""The document could not be read (missing file, HTTP failure, too large)."""

EXIT_GATE_FAILED = 9
"""Analysis finished but the contract failed validation or the breaking-change gate."""
