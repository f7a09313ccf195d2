"""
Payload Serialization

Converts arbitrary run inputs/outputs into JSON-compatible objects.

DESIGN RULES:
- Result is always a dict (non-objects are wrapped under a default key)
- Unserializable payloads raise SerializationError (a programming error,
  not a transport problem)
"""

from typing import Any, Dict

from langchain_core.messages import BaseMessage, message_to_dict
from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError

from runtrace.core.errors import SerializationError

INPUT_KEY = "input"
OUTPUT_KEY = "output"

_ANY_ADAPTER = TypeAdapter(Any)


def _convert_messages(value: Any) -> Any:
    """Replace LangChain message objects with their dict form."""
    if isinstance(value, BaseMessage):
        return message_to_dict(value)
    if isinstance(value, dict):
        return {k: _convert_messages(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert_messages(v) for v in value]
    return value


def to_jsonable(value: Any) -> Any:
    """
    Convert a value to plain JSON types.

    Handles pydantic models, dataclasses, datetimes, UUIDs, enums and
    LangChain messages.

    Raises:
        SerializationError: if the value cannot be represented as JSON
    """
    try:
        return _ANY_ADAPTER.dump_python(_convert_messages(value), mode="json")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize {type(value).__name__}: {e}") from e


def ensure_object(value: Any, key: str) -> Dict[str, Any]:
    """Serialize `value`, wrapping non-objects as {key: value}."""
    json_value = to_jsonable(value)
    if not isinstance(json_value, dict):
        json_value = {key: json_value}
    return json_value


def ensure_inputs_object(value: Any) -> Dict[str, Any]:
    return ensure_object(value, INPUT_KEY)


def ensure_outputs_object(value: Any) -> Dict[str, Any]:
    return ensure_object(value, OUTPUT_KEY)
