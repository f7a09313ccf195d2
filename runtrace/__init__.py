"""
runtrace - hierarchical run tracing client.

Records runs (spans) with dotted-order lineage and ships them to a
collector over HTTP.
"""

from runtrace.core.config import TracingSettings, get_settings, is_tracing_enabled
from runtrace.core.errors import (
    ConfigurationError,
    RunStateError,
    RunValidationError,
    ScopeClosedError,
    SerializationError,
    TracingDisabledError,
    TracingError,
    TransportError,
)
from runtrace.schemas.metrics import Metrics
from runtrace.schemas.run import Run, RunType, RunUpdate
from runtrace.observability.transport import RunTransport, LoggingRunTransport
from runtrace.observability.http_client import HttpRunClient, get_default_client
from runtrace.observability.observer import LoggingObserver, ObservableNodeWrapper, Observer
from runtrace.tracing.context import TraceContext, get_current_tracer
from runtrace.tracing.tracer import Tracer
from runtrace.tracing.scope import RunScope
from runtrace.tracing.decorator import trace_node, trace_node_sync, traceable
from runtrace.tracing.graph import GraphTrace
from runtrace.tracing.factory import TracerFactory

__version__ = "0.1.0"

__all__ = [
    "TracingSettings",
    "get_settings",
    "is_tracing_enabled",
    "ConfigurationError",
    "RunStateError",
    "RunValidationError",
    "ScopeClosedError",
    "SerializationError",
    "TracingDisabledError",
    "TracingError",
    "TransportError",
    "Metrics",
    "Run",
    "RunType",
    "RunUpdate",
    "RunTransport",
    "LoggingRunTransport",
    "HttpRunClient",
    "get_default_client",
    "LoggingObserver",
    "ObservableNodeWrapper",
    "Observer",
    "TraceContext",
    "get_current_tracer",
    "Tracer",
    "RunScope",
    "trace_node",
    "trace_node_sync",
    "traceable",
    "GraphTrace",
    "TracerFactory",
]
