"""
Tracer Tests

Hierarchy derivation, context attachment and the best-effort save
protocol, exercised against an in-memory transport.
"""

import logging
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from runtrace.core.errors import ConfigurationError, RunStateError, RunValidationError
from runtrace.observability.transport import RunTransport
from runtrace.schemas.metrics import Metrics
from runtrace.schemas.run import RunType
from runtrace.tracing.context import TraceContext
from runtrace.tracing.ordering import is_ancestor, parent_of
from runtrace.tracing.tracer import Tracer


def test_parent_child_grandchild_linkage(recorder):
    parent = Tracer("Parent", RunType.CHAIN, {}, client=recorder)
    child = parent.create_child("Child", RunType.LLM, {})
    grandchild = child.create_child("Grandchild", RunType.TOOL, {})

    assert child.parent_run_id == parent.run_id
    assert grandchild.parent_run_id == child.run_id
    assert child.trace_id == grandchild.trace_id == parent.run_id
    assert grandchild.dotted_order.startswith(child.dotted_order)
    assert child.dotted_order.startswith(parent.dotted_order)
    assert parent_of(grandchild.dotted_order) == child.dotted_order


def test_root_is_resolved_when_first_child_is_derived():
    parent = Tracer("Parent", RunType.CHAIN, {})
    assert parent.trace_id is None
    assert parent.dotted_order is None

    parent.create_child("Child", RunType.LLM, {})

    assert parent.trace_id == parent.run_id
    assert parent.dotted_order == parent.run.generate_dotted_order(None)


def test_children_share_transport_and_correlation(recorder):
    parent = Tracer("Parent", RunType.CHAIN, {}, client=recorder, project="demo").with_thread_id("t-9")
    child = parent.create_child("Child", RunType.LLM, {})

    assert child.client is recorder
    assert child.thread_id == "t-9"
    assert child.session_name == "demo"


def test_project_defaults_to_configured_project(monkeypatch):
    from runtrace.testing import reset_settings

    monkeypatch.setenv("LANGSMITH_PROJECT", "from-env")
    reset_settings()

    assert Tracer("r", RunType.CHAIN, {}).session_name == "from-env"


def test_attach_context_adopts_trace_and_thread():
    external_trace = uuid4()
    tracer = Tracer("Resumed", RunType.CHAIN, {})
    tracer.attach_context(TraceContext(trace_id=external_trace, thread_id="t1"))

    assert tracer.trace_id == external_trace
    assert tracer.thread_id == "t1"
    assert tracer.parent_run_id is None


def test_attach_context_with_parent_and_key():
    upstream = Tracer("Upstream", RunType.CHAIN, {})
    upstream.create_child("warmup", RunType.CHAIN, {})
    context = upstream.export_context().with_parent(upstream.run_id)

    downstream = Tracer("Downstream", RunType.CHAIN, {}).attach_context(context)

    assert downstream.trace_id == upstream.run_id
    assert downstream.parent_run_id == upstream.run_id
    assert downstream.dotted_order == upstream.dotted_order


def test_export_context_defaults_trace_id_to_own_id():
    tracer = Tracer("r", RunType.CHAIN, {}).with_thread_id("t")
    context = tracer.export_context()

    assert context.trace_id == tracer.run_id
    assert context.thread_id == "t"
    assert context.parent_run_id is None


@pytest.mark.asyncio
async def test_save_start_posts_root(recorder):
    tracer = Tracer("Root", RunType.CHAIN, {"q": 1}, client=recorder)

    assert await tracer.save_start() is True

    [posted] = recorder.created
    assert posted.id == tracer.run_id
    assert posted.trace_id == tracer.run_id
    assert posted.dotted_order == tracer.dotted_order
    assert posted.inputs == {"q": 1}


@pytest.mark.asyncio
async def test_save_end_wraps_scalar_outputs(recorder):
    tracer = Tracer("Root", RunType.CHAIN, {}, client=recorder)
    await tracer.save_start()
    tracer.set_metrics(Metrics().with_tokens(2, 3))

    assert await tracer.save_end(10) is True

    update = recorder.update_for(tracer.run_id)
    assert update.outputs == {"output": 10}
    assert update.end_time is not None
    assert update.total_tokens == 5
    assert update.error is None


@pytest.mark.asyncio
async def test_save_error_records_message(recorder):
    tracer = Tracer("Root", RunType.CHAIN, {}, client=recorder)
    await tracer.save_start()

    await tracer.save_error("boom")

    update = recorder.update_for(tracer.run_id)
    assert update.error == "boom"
    assert update.outputs == {}


@pytest.mark.asyncio
async def test_transport_failures_are_swallowed(failing_recorder, caplog):
    tracer = Tracer("Root", RunType.CHAIN, {}, client=failing_recorder)

    with caplog.at_level(logging.WARNING, logger="runtrace"):
        assert await tracer.save_start() is False
        assert await tracer.save_end({"ok": True}) is False

    assert failing_recorder.call_count == 2
    assert tracer.run.is_finished
    assert "HTTP 503" in caplog.text


@pytest.mark.asyncio
async def test_second_finalize_is_rejected(recorder):
    tracer = Tracer("Root", RunType.CHAIN, {}, client=recorder)
    await tracer.save_end({"first": 1})

    with pytest.raises(RunStateError):
        await tracer.save_end({"second": 2})

    assert tracer.run.outputs == {"first": 1}
    assert len(recorder.updated) == 1


@pytest.mark.asyncio
async def test_blank_name_is_not_transmitted(recorder):
    tracer = Tracer(" ", RunType.CHAIN, {}, client=recorder)

    with pytest.raises(RunValidationError):
        await tracer.post()
    assert recorder.created == []


@pytest.mark.asyncio
async def test_missing_api_key_is_a_configuration_error():
    tracer = Tracer("Root", RunType.CHAIN, {})

    with pytest.raises(ConfigurationError):
        await tracer.save_start()


@pytest.mark.asyncio
async def test_children_posted_before_parent_still_nest(recorder):
    parent = Tracer("Parent", RunType.CHAIN, {}, client=recorder)
    child = parent.create_child("Child", RunType.TOOL, {})

    await child.save_start()
    await parent.save_start()

    child_run, parent_run = recorder.created
    assert child_run.trace_id == parent_run.id
    assert is_ancestor(parent_run.dotted_order, child_run.dotted_order)


@pytest.mark.asyncio
async def test_child_shares_default_client_with_parent():
    with patch(
        "runtrace.observability.http_client.HttpRunClient.from_env",
        side_effect=lambda: MagicMock(spec=RunTransport),
    ) as from_env:
        parent = Tracer("Parent", RunType.CHAIN, {})
        child = parent.create_child("Child", RunType.LLM, {})

        await parent.save_start()
        await child.save_start()

    assert from_env.call_count == 1
    assert child.client is parent.client
    parent.client.create_run.assert_awaited()
    assert parent.client.create_run.await_count == 2


@pytest.mark.asyncio
async def test_unexpected_transport_error_is_logged(caplog):
    transport = MagicMock(spec=RunTransport)
    transport.create_run.side_effect = RuntimeError("driver bug")
    tracer = Tracer("Root", RunType.CHAIN, {}, client=transport)

    assert await tracer.save_start() is False
    assert "driver bug" in caplog.text
