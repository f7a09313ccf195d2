"""
Run Scope

Guard around a Tracer enforcing "post at most once, end exactly once".

DESIGN RULES:
- post_start is idempotent
- end_ok / end_error close the scope; any later use raises ScopeClosedError
- PATCH delivery is best-effort
"""

from typing import Any, Dict, Optional, Union

from runtrace.core.errors import ScopeClosedError, error_message
from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import RunType
from runtrace.tracing.context import TraceContext
from runtrace.tracing.tracer import Tracer
from runtrace.utils.serialization import ensure_inputs_object, ensure_outputs_object


class RunScope:
    """
    Ergonomic wrapper standardizing input serialization, the post/end/patch
    flow and best-effort error reporting.

    Usable as an async context manager:

        async with RunScope.root("Graph", RunType.CHAIN, inputs) as scope:
            ...
    """

    def __init__(self, tracer: Tracer):
        self._tracer = tracer
        self._posted = False
        self._closed = False

    # ------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------

    @classmethod
    def root(
        cls,
        name: str,
        run_type: Union[RunType, str],
        inputs: Any,
        client: Optional[RunTransport] = None,
    ) -> "RunScope":
        """
        Root scope from any serializable inputs.

        Raises:
            SerializationError: if inputs cannot be serialized
        """
        return cls(Tracer(name, run_type, ensure_inputs_object(inputs), client=client))

    @classmethod
    def root_value(
        cls,
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        client: Optional[RunTransport] = None,
    ) -> "RunScope":
        return cls(Tracer(name, run_type, inputs, client=client))

    def with_thread_id(self, thread_id: str) -> "RunScope":
        self._check_open()
        self._tracer.with_thread_id(thread_id)
        return self

    def with_context(self, context: TraceContext) -> "RunScope":
        self._check_open()
        self._tracer.attach_context(context)
        return self

    def child(self, name: str, run_type: Union[RunType, str], inputs: Any) -> "RunScope":
        self._check_open()
        return RunScope(self._tracer.create_child(name, run_type, ensure_inputs_object(inputs)))

    def child_value(self, name: str, run_type: Union[RunType, str], inputs: Dict[str, Any]) -> "RunScope":
        self._check_open()
        return RunScope(self._tracer.create_child(name, run_type, inputs))

    # ------------------------------------------------------------
    # State
    # ------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise ScopeClosedError(f"RunScope for run {self._tracer.run_id} has already ended")

    @property
    def tracer(self) -> Tracer:
        self._check_open()
        return self._tracer

    @property
    def posted(self) -> bool:
        return self._posted

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    async def post_start(self) -> None:
        """POST the run start. Safe to call multiple times."""
        self._check_open()
        if self._posted:
            return
        await self._tracer.save_start()
        self._posted = True

    async def end_ok(self, outputs: Any) -> None:
        """
        Finish successfully and PATCH (best-effort). Closes the scope.

        Raises:
            SerializationError: if outputs cannot be serialized (scope stays open)
        """
        self._check_open()
        outputs_value = ensure_outputs_object(outputs)
        self._closed = True
        await self._tracer.save_end(outputs_value)

    async def end_error(
        self,
        error: Union[str, BaseException],
        outputs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Finish with an error and PATCH (best-effort). Closes the scope."""
        self._check_open()
        self._closed = True
        message = error if isinstance(error, str) else error_message(error)
        await self._tracer.save_error(message, outputs)

    async def __aenter__(self) -> "RunScope":
        await self.post_start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if self._closed:
            return False
        if exc is None:
            await self.end_ok({})
        else:
            await self.end_error(exc)
        return False
