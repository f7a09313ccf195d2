# Tracing Package
from runtrace.tracing.context import TraceContext, get_current_tracer
from runtrace.tracing.tracer import Tracer
from runtrace.tracing.scope import RunScope
from runtrace.tracing.decorator import trace_node, trace_node_sync, traceable
from runtrace.tracing.graph import GraphTrace
from runtrace.tracing.factory import TracerFactory

__all__ = [
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
