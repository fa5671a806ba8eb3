"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~schemalens.exceptions.SchemalensError` subclass.
Shell wrappers can inspect the exit code to tell a broken document apart
from a bad invocation without parsing stderr.

Example::

    $ schemalens services empty.json
    $ echo $?
    8   # EXIT_EMPTY_DOCUMENT -- the document declares no operations
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""The requested operation or component schema does not exist in the document."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document could not be loaded, parsed, or validated."""

EXIT_EMPTY_DOCUMENT = 8
"""The document was loaded but yields no operations to show."""
