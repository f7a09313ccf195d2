"""
Tracing Decorators

Wrap a unit of work with a run:
1. Serialize inputs (always an object)
2. POST the run (start_time, inputs)
3. Execute the work
4. PATCH outputs and end_time, or the error

DESIGN RULES (NON-NEGOTIABLE):
- Tracing disabled => call the work directly, no Run is allocated
- Exceptions from the work propagate unchanged
- Tracing infrastructure failures are logged, never raised
- Serialization failures are raised (programming error in the caller)
"""

import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from runtrace.core.config import is_tracing_enabled
from runtrace.core.errors import SerializationError, TracingError, error_message
from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import RunType
from runtrace.tracing.context import _CURRENT_TRACER, get_current_tracer
from runtrace.tracing.runner import get_background_loop
from runtrace.tracing.tracer import Tracer
from runtrace.utils.serialization import ensure_inputs_object, ensure_outputs_object


logger = logging.getLogger(__name__)

I = TypeVar("I")
O = TypeVar("O")


def _start_tracer(
    name: str,
    run_type: Union[RunType, str],
    inputs: dict,
    client: Optional[RunTransport],
) -> Tracer:
    """New tracer, nested under the active tracer if there is one."""
    parent = get_current_tracer()
    if parent is None:
        return Tracer(name, run_type, inputs, client=client)

    tracer = parent.create_child(name, run_type, inputs)
    if client is not None:
        tracer.with_client(client)
    return tracer


async def _attempt(action: str, tracer: Tracer, send: Callable[[], Awaitable[Any]]) -> None:
    """Run a tracing step; infrastructure failures are logged only."""
    try:
        await send()
    except SerializationError:
        raise
    except TracingError as e:
        logger.warning(f"Tracing error ({action}) for run {tracer.name}: {e}")
    except Exception:
        # Never throw - observability failure must not affect execution
        logger.exception(f"Unexpected tracing failure ({action}) for run {tracer.name}")


async def trace_node(
    name: str,
    run_type: Union[RunType, str],
    inputs: I,
    fn: Callable[[I], Awaitable[O]],
    *,
    client: Optional[RunTransport] = None,
) -> O:
    """
    Trace an async unit of work.

    Args:
        name: Run name
        run_type: Run kind
        inputs: Passed to `fn` unchanged; recorded as the run inputs
        fn: Coroutine function taking `inputs`
        client: Optional transport (defaults to the environment client)

    Returns:
        Whatever `fn` returns

    Raises:
        Whatever `fn` raises, unchanged
        SerializationError: if inputs or outputs cannot be serialized
    """
    if not is_tracing_enabled():
        return await fn(inputs)

    inputs_value = ensure_inputs_object(inputs)
    tracer = _start_tracer(name, run_type, inputs_value, client)

    await _attempt("post", tracer, tracer.save_start)

    token = _CURRENT_TRACER.set(tracer)
    try:
        output = await fn(inputs)
    except Exception as e:
        await _attempt("patch", tracer, lambda: tracer.save_error(error_message(e)))
        raise
    finally:
        _CURRENT_TRACER.reset(token)

    outputs_value = ensure_outputs_object(output)
    await _attempt("patch", tracer, lambda: tracer.save_end(outputs_value))
    return output


def trace_node_sync(
    name: str,
    run_type: Union[RunType, str],
    inputs: I,
    fn: Callable[[I], O],
    *,
    client: Optional[RunTransport] = None,
) -> O:
    """
    Synchronous version of trace_node.

    Transport calls run on the shared background event loop.
    """
    if not is_tracing_enabled():
        return fn(inputs)

    inputs_value = ensure_inputs_object(inputs)
    tracer = _start_tracer(name, run_type, inputs_value, client)
    loop = get_background_loop()

    loop.run(_attempt("post", tracer, tracer.save_start))

    token = _CURRENT_TRACER.set(tracer)
    try:
        output = fn(inputs)
    except Exception as e:
        message = error_message(e)
        loop.run(_attempt("patch", tracer, lambda: tracer.save_error(message)))
        raise
    finally:
        _CURRENT_TRACER.reset(token)

    outputs_value = ensure_outputs_object(output)
    loop.run(_attempt("patch", tracer, lambda: tracer.save_end(outputs_value)))
    return output


def _bind_inputs(signature: inspect.Signature, args: tuple, kwargs: dict) -> dict:
    """Call arguments as a dict, without self/cls."""
    bound = signature.bind_partial(*args, **kwargs)
    bound.apply_defaults()
    return {k: v for k, v in bound.arguments.items() if k not in ("self", "cls")}


def traceable(
    name: Union[str, Callable, None] = None,
    run_type: Union[RunType, str] = RunType.CHAIN,
    *,
    client: Optional[RunTransport] = None,
):
    """
    Decorator tracing each call of a sync or async function.

    The bound call arguments become the run inputs. Calls made while
    another traced call is active become its children.

        @traceable(run_type=RunType.TOOL)
        async def search(query: str) -> list: ...

    Can also be applied bare: @traceable
    """
    if callable(name):
        return traceable()(name)

    def decorator(func: Callable) -> Callable:
        run_name = name or func.__name__
        signature = inspect.signature(func)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                if not is_tracing_enabled():
                    return await func(*args, **kwargs)
                inputs = _bind_inputs(signature, args, kwargs)
                return await trace_node(
                    run_name, run_type, inputs, lambda _: func(*args, **kwargs), client=client
                )
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            if not is_tracing_enabled():
                return func(*args, **kwargs)
            inputs = _bind_inputs(signature, args, kwargs)
            return trace_node_sync(
                run_name, run_type, inputs, lambda _: func(*args, **kwargs), client=client
            )
        return sync_wrapper

    return decorator
