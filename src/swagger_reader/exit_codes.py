"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~swagger_reader.exceptions.SwaggerReaderError`
subclass. They only matter for the local CLI commands; MCP tool failures are
reported in-band as error results.

Example::

    $ swagger-reader check https://example.com/missing.json
    $ echo $?
    5   # EXIT_HTTP_ERROR -- the document URL returned a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_TIMEOUT = 4
"""Fetching or resolving the document exceeded the configured timeout."""

EXIT_HTTP_ERROR = 5
"""The document URL answered with a non-2xx status or an unexpected content type."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document could not be parsed, resolved, or recognised."""
