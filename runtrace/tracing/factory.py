from typing import Any, Dict, Optional, Union

from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import RunType
from runtrace.tracing.context import TraceContext
from runtrace.tracing.tracer import Tracer


class TracerFactory:
    """Named constructors for common Tracer configurations."""

    @staticmethod
    def create(name: str, run_type: Union[RunType, str], inputs: Dict[str, Any]) -> Tracer:
        return Tracer(name, run_type, inputs)

    @staticmethod
    def create_with_client(
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        client: RunTransport,
    ) -> Tracer:
        return Tracer(name, run_type, inputs, client=client)

    @staticmethod
    def create_with_thread(
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        thread_id: str,
    ) -> Tracer:
        return Tracer(name, run_type, inputs).with_thread_id(thread_id)

    @staticmethod
    def create_with_context(
        name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        context: TraceContext,
    ) -> Tracer:
        return Tracer(name, run_type, inputs).attach_context(context)

    @staticmethod
    def create_root(name: str, run_type: Union[RunType, str], inputs: Dict[str, Any]) -> Tracer:
        """Tracer whose run is resolved as the root of a new trace up front."""
        tracer = Tracer(name, run_type, inputs)
        return tracer.attach_context(_root_context(tracer))

    @staticmethod
    def create_for_node(
        node_name: str,
        run_type: Union[RunType, str],
        inputs: Dict[str, Any],
        parent_context: Optional[TraceContext] = None,
    ) -> Tracer:
        """Tracer for a graph node: joins `parent_context`, or starts a new trace."""
        tracer = Tracer(node_name, run_type, inputs)
        return tracer.attach_context(parent_context or _root_context(tracer))


def _root_context(tracer: Tracer) -> TraceContext:
    return TraceContext(
        trace_id=tracer.run_id,
        dotted_order=tracer.run.generate_dotted_order(None),
    )
