"""
Node Observers

Hooks notified around traced node execution.

DESIGN RULES:
- Observers are side-effect only
- An observer failure is logged and never affects the node
- Observers see serialized payloads, never live objects
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, TypeVar, Union

from runtrace.core.errors import SerializationError, error_message
from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import RunType
from runtrace.tracing.decorator import trace_node
from runtrace.utils.serialization import to_jsonable


logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")


class Observer(ABC):
    """Receives node lifecycle events."""

    @abstractmethod
    def on_node_start(self, node_name: str, inputs: Any) -> None:
        pass

    @abstractmethod
    def on_node_end(self, node_name: str, outputs: Any) -> None:
        pass

    @abstractmethod
    def on_node_error(self, node_name: str, error: str) -> None:
        pass


class LoggingObserver(Observer):
    """Logs node events."""

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def on_node_start(self, node_name: str, inputs: Any) -> None:
        self._log.info(f"[NODE] '{node_name}' started")

    def on_node_end(self, node_name: str, outputs: Any) -> None:
        self._log.info(f"[NODE] '{node_name}' completed")

    def on_node_error(self, node_name: str, error: str) -> None:
        self._log.warning(f"[NODE] '{node_name}' error: {error}")


def _safe_jsonable(value: Any) -> Any:
    try:
        return to_jsonable(value)
    except SerializationError:
        return None


class ObservableNode:
    """
    Observer registry with fan-out notification.

    Thread-safe for concurrent registration and notification.
    """

    def __init__(self):
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    def add_observer(self, observer: Observer) -> None:
        with self._lock:
            self._observers.append(observer)

    @property
    def observers(self) -> List[Observer]:
        with self._lock:
            return list(self._observers)

    def _notify(self, event: str, node_name: str, payload: Any) -> None:
        for observer in self.observers:
            try:
                getattr(observer, event)(node_name, payload)
            except Exception:
                # Never throw - observer failure must not affect the node
                logger.exception(f"Observer {type(observer).__name__}.{event} failed for '{node_name}'")

    def notify_start(self, node_name: str, inputs: Any) -> None:
        self._notify("on_node_start", node_name, inputs)

    def notify_end(self, node_name: str, outputs: Any) -> None:
        self._notify("on_node_end", node_name, outputs)

    def notify_error(self, node_name: str, error: str) -> None:
        self._notify("on_node_error", node_name, error)


class ObservableNodeWrapper(ObservableNode):
    """
    Makes a node function observable and traced.

        wrapper = ObservableNodeWrapper("chatbot", RunType.CHAIN).with_observer(LoggingObserver())
        result = await wrapper.execute(state, chatbot_node)
    """

    def __init__(
        self,
        name: str,
        run_type: Union[RunType, str],
        client: Optional[RunTransport] = None,
    ):
        super().__init__()
        self.name = name
        self.run_type = run_type
        self._client = client

    def with_observer(self, observer: Observer) -> "ObservableNodeWrapper":
        self.add_observer(observer)
        return self

    async def execute(self, inputs: I, fn: Callable[[I], Awaitable[O]]) -> O:
        """
        Notify start, run `fn` under trace_node, notify end or error.

        Returns the node's result; re-raises the node's exception unchanged.
        """
        self.notify_start(self.name, _safe_jsonable(inputs))

        try:
            result = await trace_node(self.name, self.run_type, inputs, fn, client=self._client)
        except Exception as e:
            self.notify_error(self.name, error_message(e))
            raise

        self.notify_end(self.name, _safe_jsonable(result))
        return result
