"""
Dotted Order

Sortable, self-describing position of a run inside its trace.

A segment is the run's start time as a fixed-width UTC timestamp with
microsecond precision, a literal "Z", then the full run UUID:

    20240919T171648521691Z0e01bf50-474d-4536-810f-67d3ee7ea3e7

A child's key is its parent's key, a ".", then the child's own segment.
Plain string comparison therefore orders runs by creation time, and
ancestry is prefix containment.

DESIGN RULES:
- Pure functions, no hidden state
- Same (start_time, run_id, parent key) always gives the same key
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

SEPARATOR = "."
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"
TIMESTAMP_LENGTH = len("20240919T171648521691Z")
UUID_LENGTH = 36


def format_segment(start_time: datetime, run_id: UUID) -> str:
    """Single-run segment: timestamp, "Z", canonical UUID."""
    if start_time.tzinfo is not None:
        start_time = start_time.astimezone(timezone.utc)
    return start_time.strftime(TIMESTAMP_FORMAT) + str(run_id)


def derive_dotted_order(
    start_time: datetime,
    run_id: UUID,
    parent_dotted_order: Optional[str] = None,
) -> str:
    """
    Build the dotted order for a run.

    Args:
        start_time: When the run was created
        run_id: The run's unique id
        parent_dotted_order: The parent's key, if the run has a keyed parent

    Returns:
        "{parent}.{segment}" or just "{segment}" for a root
    """
    segment = format_segment(start_time, run_id)
    if parent_dotted_order:
        return f"{parent_dotted_order}{SEPARATOR}{segment}"
    return segment


def parse_dotted_order(dotted_order: str) -> List[Tuple[datetime, UUID]]:
    """
    Split a key into its (start_time, run_id) segments, root first.

    Raises:
        ValueError: if any segment is malformed
    """
    parsed = []
    for part in dotted_order.split(SEPARATOR):
        if len(part) != TIMESTAMP_LENGTH + UUID_LENGTH:
            raise ValueError(f"Malformed dotted order segment: {part!r}")
        started = datetime.strptime(part[:TIMESTAMP_LENGTH], TIMESTAMP_FORMAT)
        parsed.append((started.replace(tzinfo=timezone.utc), UUID(part[TIMESTAMP_LENGTH:])))
    return parsed


def is_ancestor(ancestor: str, dotted_order: str) -> bool:
    """True if `ancestor` is a strict ancestor key of `dotted_order`."""
    return dotted_order.startswith(ancestor + SEPARATOR)


def parent_of(dotted_order: str) -> Optional[str]:
    """The parent key, or None for a root key."""
    head, sep, _ = dotted_order.rpartition(SEPARATOR)
    return head if sep else None


def build_tree(keys: Iterable[str]) -> Dict[Optional[str], List[str]]:
    """
    Rebuild the run hierarchy from a flat collection of keys.

    Returns:
        Mapping of parent key -> child keys in creation order.
        Roots are listed under None.
    """
    tree: Dict[Optional[str], List[str]] = {}
    for key in sorted(set(keys)):
        tree.setdefault(parent_of(key), []).append(key)
    return tree
