"""
Message Payload Schemas

Chat message shapes used as run inputs/outputs for LLM and tool runs.
Thin payload models only - no behaviour.
"""

from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    id: str
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class HumanMessage(BaseModel):
    role: Literal["human"] = "human"
    content: str


class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str


class AIMessage(BaseModel):
    role: Literal["ai"] = "ai"
    content: str
    tool_calls: List[ToolCall] = Field(default_factory=list)


class ToolMessage(BaseModel):
    role: Literal["tool"] = "tool"
    tool_call_id: str
    content: str
    name: str


Message = Annotated[
    Union[HumanMessage, SystemMessage, AIMessage, ToolMessage],
    Field(discriminator="role"),
]
