"""
Run Schemas

A Run is one traced unit of work. It carries identity, timing, payload
and hierarchy linkage (parent_run_id, trace_id, dotted_order).

DESIGN RULES:
- Linkage is held as identifier values, never as object references
- outputs and end_time are set together, exactly once
- trace_id never changes once resolved
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from runtrace.core.errors import RunStateError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunType(str, Enum):
    """Well-known run kinds. Any other non-empty string is a custom kind."""
    CHAIN = "chain"
    LLM = "llm"
    TOOL = "tool"
    RETRIEVER = "retriever"
    EMBEDDING = "embedding"
    PROMPT = "prompt"
    RUNNABLE = "runnable"


def run_type_name(run_type: Union[RunType, str]) -> str:
    """Wire name for a run type (enum value or the custom string itself)."""
    if isinstance(run_type, RunType):
        return run_type.value
    return str(run_type)


class Run(BaseModel):
    """
    A single traced execution span.

    Created pending in memory, POSTed once, finalized and PATCHed once.
    """
    id: UUID = Field(default_factory=uuid4)
    name: str
    run_type: Union[RunType, str]
    inputs: Dict[str, Any] = Field(default_factory=dict)
    outputs: Optional[Dict[str, Any]] = None
    start_time: datetime = Field(default_factory=_utc_now)
    end_time: Optional[datetime] = None

    # Hierarchy
    parent_run_id: Optional[UUID] = None
    trace_id: Optional[UUID] = None
    dotted_order: Optional[str] = None

    # Correlation
    session_id: Optional[str] = None
    session_name: Optional[str] = None
    thread_id: Optional[str] = None

    error: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)

    # Metrics
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    prompt_cost: Optional[float] = None
    completion_cost: Optional[float] = None
    total_cost: Optional[float] = None

    @classmethod
    def create(cls, name: str, run_type: Union[RunType, str], inputs: Dict[str, Any]) -> "Run":
        """New run with a fresh id and the current time, no linkage."""
        return cls(name=name, run_type=run_type, inputs=inputs)

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    def generate_dotted_order(self, parent_dotted_order: Optional[str] = None) -> str:
        """Ordering key for this run under the given parent key."""
        # Lazy: the runtrace.tracing package init imports tracer, which imports this module
        from runtrace.tracing.ordering import derive_dotted_order
        return derive_dotted_order(self.start_time, self.id, parent_dotted_order)

    def set_error(self, error: str) -> None:
        self.error = error

    def end(self, outputs: Dict[str, Any]) -> None:
        """
        Finalize the run.

        Raises:
            RunStateError: if the run was already finalized
        """
        if self.is_finished:
            raise RunStateError(f"Run {self.id} ({self.name}) is already finished")
        self.outputs = outputs
        self.end_time = _utc_now()

    def to_create_payload(self) -> Dict[str, Any]:
        """JSON body for the create (POST) call."""
        exclude = set()
        if not self.tags:
            exclude.add("tags")
        if not self.extra:
            exclude.add("extra")
        payload = self.model_dump(mode="json", exclude_none=True, exclude=exclude)
        payload["run_type"] = run_type_name(self.run_type)
        return payload


class RunUpdate(BaseModel):
    """
    Terminal PATCH body.

    Subset of a Run: outputs, end_time, error and metrics only.
    """
    outputs: Optional[Dict[str, Any]] = None
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    prompt_cost: Optional[float] = None
    completion_cost: Optional[float] = None
    total_cost: Optional[float] = None

    @classmethod
    def from_run(cls, run: Run) -> "RunUpdate":
        return cls(
            outputs=run.outputs,
            end_time=run.end_time,
            error=run.error,
            prompt_tokens=run.prompt_tokens,
            completion_tokens=run.completion_tokens,
            total_tokens=run.total_tokens,
            prompt_cost=run.prompt_cost,
            completion_cost=run.completion_cost,
            total_cost=run.total_cost,
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
