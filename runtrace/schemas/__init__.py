# Schemas Package
from runtrace.schemas.messages import AIMessage, HumanMessage, Message, SystemMessage, ToolCall, ToolMessage
from runtrace.schemas.metrics import Metrics
from runtrace.schemas.run import Run, RunType, RunUpdate

__all__ = [
    "AIMessage",
    "HumanMessage",
    "Message",
    "SystemMessage",
    "ToolCall",
    "ToolMessage",
    "Metrics",
    "Run",
    "RunType",
    "RunUpdate",
]
