"""
Tracer

Live handle around one Run. Derives children and drives the two-phase
save protocol (POST on start, PATCH on finish) against a transport.

DESIGN RULES:
- Each Tracer owns its Run exclusively; children are new objects
- Parent linkage is copied by value (no parent pointers)
- Transport failures are logged and never abort the traced operation
"""

import logging
from typing import Any, Dict, Optional, Union
from uuid import UUID

from runtrace.core.config import get_settings
from runtrace.core.errors import (
    ConfigurationError,
    RunValidationError,
    TracingDisabledError,
    TransportError,
)
from runtrace.observability.http_client import get_default_client
from runtrace.observability.transport import RunTransport
from runtrace.schemas.metrics import Metrics
from runtrace.schemas.run import Run, RunType, RunUpdate
from runtrace.tracing.context import TraceContext
from runtrace.utils.serialization import ensure_outputs_object
from runtrace.utils.validation import validate_run


logger = logging.getLogger(__name__)


class Tracer:
    """
    Owns one Run plus an optional shared transport.

    State: Created -> Started (post) -> Finished (end + patch).
    """

    def __init__(
        self,
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        client: Optional[RunTransport] = None,
        project: Optional[str] = None,
    ):
        """
        Wrap a fresh run. Nothing is transmitted.

        Args:
            name: Run label
            run_type: Run kind (RunType member or custom string)
            inputs: Structured inputs (already an object)
            client: Transport shared with children. Defaults to the
                process-wide HttpRunClient (get_default_client) on first send.
            project: Session name. Defaults to the configured project.
        """
        self.run = Run.create(name, run_type, inputs)
        self.run.session_name = project if project is not None else get_settings().project
        self._client = client

    def __repr__(self) -> str:
        return f"Tracer(name={self.run.name!r}, id={self.run.id}, dotted_order={self.run.dotted_order!r})"

    # ------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------

    def with_client(self, client: RunTransport) -> "Tracer":
        self._client = client
        return self

    def with_thread_id(self, thread_id: str) -> "Tracer":
        self.run.thread_id = thread_id
        return self

    def attach_context(self, context: TraceContext) -> "Tracer":
        """Adopt the lineage carried by an externally supplied context."""
        self.run.trace_id = context.trace_id
        if context.parent_run_id is not None:
            self.run.parent_run_id = context.parent_run_id
        if context.dotted_order is not None:
            self.run.dotted_order = context.dotted_order
        if context.thread_id is not None:
            self.run.thread_id = context.thread_id
        if context.session_name is not None:
            self.run.session_name = context.session_name
        return self

    def export_context(self) -> TraceContext:
        return TraceContext(
            trace_id=self.run.trace_id or self.run.id,
            parent_run_id=self.run.parent_run_id,
            dotted_order=self.run.dotted_order,
            thread_id=self.run.thread_id,
            session_name=self.run.session_name,
        )

    # ------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------

    def _resolve_lineage(self) -> None:
        """
        Assign trace membership and the ordering key if still unresolved.

        A tracer without a trace becomes a root. A tracer that joined a
        trace through a context carrying no key takes a root-like segment.
        """
        if self.run.trace_id is None:
            self.run.trace_id = self.run.id
            self.run.dotted_order = self.run.generate_dotted_order(None)
        elif self.run.dotted_order is None:
            self.run.dotted_order = self.run.generate_dotted_order(None)

    def create_child(
        self,
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
    ) -> "Tracer":
        """
        Derive a child tracer.

        The child shares this tracer's transport and inherits trace_id,
        thread_id and session_name. If this tracer has no ordering key
        yet it resolves itself as root first, so the child's key always
        extends the parent's.
        """
        self._resolve_lineage()

        child = Tracer(name, run_type, inputs, client=self._client)
        child.run.session_name = self.run.session_name
        child.run.parent_run_id = self.run.id
        child.run.trace_id = self.run.trace_id
        child.run.dotted_order = child.run.generate_dotted_order(self.run.dotted_order)
        child.run.thread_id = self.run.thread_id
        return child

    # ------------------------------------------------------------
    # Local lifecycle
    # ------------------------------------------------------------

    def end(self, outputs: Dict[str, Any]) -> None:
        self.run.end(outputs)

    def set_error(self, error: str) -> None:
        self.run.set_error(error)

    def set_metrics(self, metrics: Metrics) -> None:
        for field, value in metrics.model_dump(exclude_none=True).items():
            setattr(self.run, field, value)

    # ------------------------------------------------------------
    # Transmission
    # ------------------------------------------------------------

    def _get_client(self) -> RunTransport:
        if self._client is None:
            self._client = get_default_client()
        return self._client

    async def post(self) -> None:
        """
        POST the run. Roots get their trace_id and key here.

        Raises:
            ConfigurationError: no client and none can be built
            RunValidationError: run is not fit for transmission
            TransportError: delivery failed
        """
        self._resolve_lineage()
        validate_run(self.run)
        await self._get_client().create_run(self.run)

    async def patch(self) -> None:
        """
        PATCH outputs, end_time, error and metrics.

        Raises:
            ConfigurationError: no client and none can be built
            TransportError: delivery failed
        """
        await self._get_client().update_run(self.run.id, RunUpdate.from_run(self.run))

    async def _deliver(self, action: str, send) -> bool:
        try:
            await send()
        except TracingDisabledError:
            logger.debug(f"Tracing disabled, skipped {action} for run {self.run.name}")
            return False
        except TransportError as e:
            logger.warning(f"Tracing error ({action}) for run {self.run.name} [{self.run.id}]: {e}")
            return False
        except (ConfigurationError, RunValidationError):
            raise
        except Exception:
            # Never throw - a broken transport must not replace the caller's outcome
            logger.exception(f"Unexpected tracing failure ({action}) for run {self.run.name} [{self.run.id}]")
            return False
        return True

    async def save_start(self) -> bool:
        """
        Best-effort start. Returns True if the collector accepted it.
        """
        return await self._deliver("post", self.post)

    async def save_end(self, outputs: Any) -> bool:
        """
        Finalize with outputs, then best-effort PATCH.

        Non-object outputs are wrapped as {"output": value}.
        """
        self.end(ensure_outputs_object(outputs))
        return await self._deliver("patch", self.patch)

    async def save_error(self, error: str, outputs: Optional[Dict[str, Any]] = None) -> bool:
        """Mark failed, finalize, then best-effort PATCH."""
        self.set_error(error)
        self.end(outputs or {})
        return await self._deliver("patch", self.patch)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def client(self) -> Optional[RunTransport]:
        return self._client

    @property
    def run_id(self) -> UUID:
        return self.run.id

    @property
    def trace_id(self) -> Optional[UUID]:
        return self.run.trace_id

    @property
    def parent_run_id(self) -> Optional[UUID]:
        return self.run.parent_run_id

    @property
    def dotted_order(self) -> Optional[str]:
        return self.run.dotted_order

    @property
    def thread_id(self) -> Optional[str]:
        return self.run.thread_id

    @property
    def session_name(self) -> Optional[str]:
        return self.run.session_name

    @property
    def name(self) -> str:
        return self.run.name

    @property
    def run_type(self) -> Union[RunType, str]:
        return self.run.run_type
