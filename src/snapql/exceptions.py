"""Custom exception hierarchy for the SnapQL core.

The taxonomy mirrors how failures are reported to the caller: every error
raised inside the core is converted to an ``{error, data}`` envelope at the
service boundary, but the concrete class tells the caller what to do next.

Exception Categories:
- Configuration errors for missing or invalid settings
- Connectivity errors for database network/auth failures
- Generation errors for language-model provider failures
- Introspection errors, a kind of generation failure raised before any
  model call is made
"""

from __future__ import annotations


class SnapqlError(Exception):
    """Base exception for SnapQL core operations."""


class ConfigurationError(SnapqlError):
    """Raised when an operation needs configuration that is not present.

    The caller should direct the user to settings rather than retry.
    """


class ConnectivityError(SnapqlError):
    """Raised when the database cannot be reached or rejects credentials."""


class GenerationError(SnapqlError):
    """Raised when a query cannot be generated.

    The upstream message (auth, quota, malformed output) is kept verbatim in
    ``str(exc)`` and the original exception is chained as ``__cause__``.
    """


class SchemaIntrospectionError(GenerationError):
    """Raised when schema introspection fails.

    This covers both a failing catalog query and a catalog that returns no
    user tables at all. Generation is aborted before any model call.
    """
