"""
Tracing Errors

DESIGN RULES:
- Configuration and serialization errors reach the caller
- Transport errors are logged and swallowed by the save paths
- Business exceptions from traced work are never wrapped
"""

from typing import Optional


class TracingError(Exception):
    """Base class for every error raised by the tracing client."""


class ConfigurationError(TracingError):
    """A required setting (e.g. the API key) is missing."""


class TransportError(TracingError):
    """The collector rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TracingDisabledError(TracingError):
    """A transport call was attempted with tracing switched off."""

    def __init__(self, message: str = "Tracing is disabled"):
        super().__init__(message)


class SerializationError(TracingError):
    """A payload could not be converted to a JSON-compatible value."""


class RunValidationError(TracingError):
    """A run is not fit for transmission."""


class RunStateError(TracingError):
    """A run lifecycle step was performed out of order."""


class ScopeClosedError(RunStateError):
    """A RunScope was used after it ended."""


def error_message(error: BaseException) -> str:
    """Message recorded on a failed run."""
    return str(error) or type(error).__name__
