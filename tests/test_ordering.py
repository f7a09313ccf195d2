"""
Dotted Order Tests

Verifies the ordering-key contract:
- Fixed-width segment format
- Prefix containment encodes ancestry
- Lexicographic order == creation order (uuid tie-break)
- Tree reconstruction from a flat list of keys
"""

import random
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from runtrace.tracing.ordering import (
    build_tree,
    derive_dotted_order,
    format_segment,
    is_ancestor,
    parent_of,
    parse_dotted_order,
)

T0 = datetime(2024, 9, 19, 17, 16, 48, 521691, tzinfo=timezone.utc)
RUN_ID = UUID("0e01bf50-474d-4536-810f-67d3ee7ea3e7")


def test_segment_format():
    assert format_segment(T0, RUN_ID) == "20240919T171648521691Z0e01bf50-474d-4536-810f-67d3ee7ea3e7"


def test_segment_is_zero_padded():
    started = datetime(2024, 1, 2, 3, 4, 5, 7, tzinfo=timezone.utc)
    assert format_segment(started, RUN_ID).startswith("20240102T030405000007Z")


def test_segment_normalizes_to_utc():
    plus_two = timezone(timedelta(hours=2))
    local = T0.astimezone(plus_two)
    assert format_segment(local, RUN_ID) == format_segment(T0, RUN_ID)


def test_root_key_is_own_segment():
    assert derive_dotted_order(T0, RUN_ID) == format_segment(T0, RUN_ID)
    assert derive_dotted_order(T0, RUN_ID, None) == format_segment(T0, RUN_ID)


def test_child_key_extends_parent_key():
    parent = derive_dotted_order(T0, uuid4())
    child = derive_dotted_order(T0 + timedelta(microseconds=1), uuid4(), parent)

    assert child.startswith(parent + ".")
    assert len(child) > len(parent)
    assert is_ancestor(parent, child)
    assert not is_ancestor(child, parent)
    assert parent_of(child) == parent
    assert parent_of(parent) is None


def test_derivation_is_deterministic():
    parent = derive_dotted_order(T0, RUN_ID)
    run_id = uuid4()
    assert derive_dotted_order(T0, run_id, parent) == derive_dotted_order(T0, run_id, parent)


def test_siblings_sort_in_creation_order():
    parent = derive_dotted_order(T0, uuid4())
    keys = [
        derive_dotted_order(T0 + timedelta(microseconds=i * 7), uuid4(), parent)
        for i in range(1, 50)
    ]

    shuffled = keys[:]
    random.shuffle(shuffled)
    assert sorted(shuffled) == keys


def test_same_microsecond_siblings_tie_break_on_id():
    parent = derive_dotted_order(T0, uuid4())
    ids = sorted((uuid4() for _ in range(10)), key=str)
    keys = [derive_dotted_order(T0, run_id, parent) for run_id in ids]

    assert sorted(reversed(keys)) == keys
    assert len(set(keys)) == len(keys)


def test_subtrees_sort_after_their_root_and_before_later_siblings():
    root = derive_dotted_order(T0, uuid4())
    first = derive_dotted_order(T0 + timedelta(seconds=1), uuid4(), root)
    first_child = derive_dotted_order(T0 + timedelta(seconds=5), uuid4(), first)
    second = derive_dotted_order(T0 + timedelta(seconds=2), uuid4(), root)

    assert sorted([second, first_child, root, first]) == [root, first, first_child, second]


def test_parse_round_trip():
    root_id, child_id = uuid4(), uuid4()
    child_time = T0 + timedelta(milliseconds=3)
    key = derive_dotted_order(child_time, child_id, derive_dotted_order(T0, root_id))

    assert parse_dotted_order(key) == [(T0, root_id), (child_time, child_id)]


@pytest.mark.parametrize("bad", ["", "20240919T171648Z", "not-a-key.also-not"])
def test_parse_rejects_malformed_keys(bad):
    with pytest.raises(ValueError):
        parse_dotted_order(bad)


def test_build_tree_from_shuffled_keys():
    root = derive_dotted_order(T0, uuid4())
    a = derive_dotted_order(T0 + timedelta(seconds=1), uuid4(), root)
    b = derive_dotted_order(T0 + timedelta(seconds=2), uuid4(), root)
    a1 = derive_dotted_order(T0 + timedelta(seconds=3), uuid4(), a)
    other_root = derive_dotted_order(T0 + timedelta(seconds=4), uuid4())

    keys = [b, other_root, a1, root, a]
    random.shuffle(keys)
    tree = build_tree(keys)

    assert tree[None] == [root, other_root]
    assert tree[root] == [a, b]
    assert tree[a] == [a1]
    assert b not in tree
