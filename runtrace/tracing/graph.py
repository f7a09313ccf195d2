"""
Graph Trace

Opinionated helpers producing a graph-style hierarchy:
- Root run "Graph" (chain)
- Step runs under the root (e.g. "chatbot", "should_continue", "tools")
- Nested runs under steps (LLM calls, tool calls, decisions)

Inputs/outputs are plain dicts so any app can supply payloads such as
{"messages": [...]}, with the list holding runtrace.schemas Message models
(HumanMessage, AIMessage, ...) or LangChain messages. LLM call payloads are
serialized before they are recorded.
"""

from typing import Any, Dict, Optional

from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import RunType
from runtrace.tracing.scope import RunScope
from runtrace.tracing.tracer import Tracer

ROOT_NAME = "Graph"


class GraphTrace:
    """Root scope plus helpers for the runs nested under it."""

    def __init__(self, root: RunScope):
        self._root = root

    @classmethod
    async def start_root(
        cls,
        inputs: Dict[str, Any],
        thread_id: Optional[str] = None,
        client: Optional[RunTransport] = None,
    ) -> "GraphTrace":
        """Start and POST the root "Graph" run."""
        root = RunScope.root_value(ROOT_NAME, RunType.CHAIN, inputs, client=client)
        if thread_id:
            root.with_thread_id(thread_id)
        await root.post_start()
        return cls(root)

    @property
    def root_scope(self) -> RunScope:
        return self._root

    @property
    def root_tracer(self) -> Tracer:
        return self._root.tracer

    async def start_node_iteration(self, node_name: str, inputs: Dict[str, Any]) -> RunScope:
        """
        Start and POST a step under the root.

        The caller ends the returned scope once the node is done.
        """
        step = self._root.child_value(node_name, RunType.CHAIN, inputs)
        await step.post_start()
        return step

    async def trace_llm_call(
        self,
        parent_node: RunScope,
        llm_name: str,
        inputs: Dict[str, Any],
        outputs: Any,
        model_name: Optional[str] = None,
    ) -> None:
        """
        Record a completed LLM call (e.g. "ChatOpenAI") under a step.

        `inputs` typically carries {"messages": [Message, ...]}; the model
        name, if given, is added under "model".
        """
        llm_inputs = dict(inputs)
        if model_name:
            llm_inputs["model"] = model_name
        llm = parent_node.child(llm_name, RunType.LLM, llm_inputs)
        await llm.post_start()
        await llm.end_ok(outputs)

    async def trace_decision(
        self,
        parent_node: RunScope,
        decision_name: str,
        inputs: Dict[str, Any],
        outputs: Any,
    ) -> None:
        """Record a routing/decision step (e.g. "should_continue")."""
        decision = parent_node.child_value(decision_name, RunType.CHAIN, inputs)
        await decision.post_start()
        await decision.end_ok(outputs)

    async def trace_tool_call(
        self,
        parent_node: RunScope,
        tool_name: str,
        inputs: Dict[str, Any],
        outputs: Any,
    ) -> None:
        """Record a tool call, named "tool/{tool_name}"."""
        tool = parent_node.child_value(f"tool/{tool_name}", RunType.TOOL, inputs)
        await tool.post_start()
        await tool.end_ok(outputs)

    async def end_root(self, outputs: Any) -> None:
        """End the root run. The GraphTrace is unusable afterwards."""
        await self._root.end_ok(outputs)
