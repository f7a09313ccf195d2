# Observability Package
from runtrace.observability.transport import RunTransport, LoggingRunTransport
from runtrace.observability.http_client import HttpRunClient, get_default_client

__all__ = ["RunTransport", "LoggingRunTransport", "HttpRunClient", "get_default_client"]
