"""
Trace Context

Portable snapshot of a run's lineage, used to continue a trace across
task, thread or process boundaries without sharing mutable state.
"""

import contextvars
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Mapping, Optional
from uuid import UUID

if TYPE_CHECKING:
    from runtrace.tracing.tracer import Tracer


TRACE_ID_HEADER = "x-trace-id"
PARENT_RUN_ID_HEADER = "x-parent-run-id"
DOTTED_ORDER_HEADER = "x-dotted-order"
THREAD_ID_HEADER = "x-thread-id"
SESSION_NAME_HEADER = "x-session-name"


@dataclass(frozen=True)
class TraceContext:
    """
    Immutable lineage snapshot.

    Attaching it to a Tracer overwrites that tracer's trace_id,
    parent_run_id, dotted_order, thread_id and session_name with the
    values carried here.
    """

    trace_id: UUID
    parent_run_id: Optional[UUID] = None
    dotted_order: Optional[str] = None
    thread_id: Optional[str] = None
    session_name: Optional[str] = None

    def with_parent(self, parent_run_id: UUID) -> "TraceContext":
        return replace(self, parent_run_id=parent_run_id)

    def with_dotted_order(self, dotted_order: str) -> "TraceContext":
        return replace(self, dotted_order=dotted_order)

    def with_thread_id(self, thread_id: str) -> "TraceContext":
        return replace(self, thread_id=thread_id)

    def with_session_name(self, session_name: str) -> "TraceContext":
        return replace(self, session_name=session_name)

    def to_headers(self) -> dict[str, str]:
        """Encode as HTTP headers for propagation to another service."""
        headers = {TRACE_ID_HEADER: str(self.trace_id)}
        if self.parent_run_id:
            headers[PARENT_RUN_ID_HEADER] = str(self.parent_run_id)
        if self.dotted_order:
            headers[DOTTED_ORDER_HEADER] = self.dotted_order
        if self.thread_id:
            headers[THREAD_ID_HEADER] = self.thread_id
        if self.session_name:
            headers[SESSION_NAME_HEADER] = self.session_name
        return headers

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Optional["TraceContext"]:
        """
        Decode headers produced by to_headers().

        Returns:
            The context, or None when no trace id header is present

        Raises:
            ValueError: if an id header is not a valid UUID
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        trace_id = lowered.get(TRACE_ID_HEADER)
        if not trace_id:
            return None

        parent_run_id = lowered.get(PARENT_RUN_ID_HEADER)
        return cls(
            trace_id=UUID(trace_id),
            parent_run_id=UUID(parent_run_id) if parent_run_id else None,
            dotted_order=lowered.get(DOTTED_ORDER_HEADER) or None,
            thread_id=lowered.get(THREAD_ID_HEADER) or None,
            session_name=lowered.get(SESSION_NAME_HEADER) or None,
        )


# Tracer active in the current task/thread (set by the traceable decorator)
_CURRENT_TRACER: contextvars.ContextVar[Optional["Tracer"]] = contextvars.ContextVar(
    "runtrace_current_tracer", default=None
)


def get_current_tracer() -> Optional["Tracer"]:
    return _CURRENT_TRACER.get()
