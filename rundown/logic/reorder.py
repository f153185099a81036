"""Sibling-list reordering helpers.

Pure, storage-agnostic computations for insert, remove, move and cut/paste on
an ordered list of member mappings. Each helper returns a new list in which
every member carries a contiguous, zero-based ``index`` equal to its rank;
inputs are never mutated. Stores and coordinators persist the result.

Positions must be plain ``int`` values. Anything else, or a value outside the
range an operation accepts, raises ``IndexOutOfRange``; no coercion happens.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple
import logging

from rundown.logic.errors import IndexOutOfRange
from rundown.logic.kinds import INDEX_FIELD

logger = logging.getLogger(__name__)

Entry = Dict[str, Any]


def renumber(entries: Sequence[Mapping[str, Any]]) -> List[Entry]:
    """Return copies of ``entries`` with ``index`` set to each member's rank."""
    return [{**dict(entry), INDEX_FIELD: rank} for rank, entry in enumerate(entries)]


def check_position(position: Any, lower: int, upper: int, operation: str) -> int:
    """Validate ``position`` lies in ``[lower, upper]`` and return it.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(position, bool) or not isinstance(position, int):
        raise IndexOutOfRange(
            f"{operation}: position must be an integer, got {position!r}",
            position=position,
            lower=lower,
            upper=upper,
        )
    if position < lower or position > upper:
        raise IndexOutOfRange(
            f"{operation}: position {position} outside [{lower}, {upper}]",
            position=position,
            lower=lower,
            upper=upper,
        )
    return position


def insert(entries: Sequence[Mapping[str, Any]], position: Any, entry: Mapping[str, Any]) -> List[Entry]:
    """Insert ``entry`` at ``position`` (valid for ``0..n``)."""
    pos = check_position(position, 0, len(entries), "insert")
    working = [dict(e) for e in entries]
    working.insert(pos, dict(entry))
    return renumber(working)


def remove(entries: Sequence[Mapping[str, Any]], position: Any) -> Tuple[List[Entry], Entry]:
    """Remove the member at ``position`` (valid for ``0..n-1``).

    Returns ``(new_list, removed_entry)``; the removed entry keeps its old index.
    """
    pos = check_position(position, 0, len(entries) - 1, "remove")
    working = [dict(e) for e in entries]
    removed = working.pop(pos)
    return renumber(working), removed


def move_up(entries: Sequence[Mapping[str, Any]], position: Any) -> List[Entry]:
    """Swap the member at ``position`` with the one above it.

    Position 0 has nothing above it and is rejected.
    """
    pos = check_position(position, 1, len(entries) - 1, "move_up")
    return _relocate(entries, pos, pos - 1)


def move_down(entries: Sequence[Mapping[str, Any]], position: Any) -> List[Entry]:
    pos = check_position(position, 0, len(entries) - 2, "move_down")
    return _relocate(entries, pos, pos + 1)


def move_to(entries: Sequence[Mapping[str, Any]], from_position: Any, to_position: Any) -> List[Entry]:
    """Move the member at ``from_position`` so it ends up at ``to_position``.

    Both positions must lie in ``0..n-1``. ``to_position`` is an index into the
    list after the member has been taken out (splice-then-splice).
    """
    last = len(entries) - 1
    src = check_position(from_position, 0, last, "move_to")
    dst = check_position(to_position, 0, last, "move_to")
    return _relocate(entries, src, dst)


def cut(entries: Sequence[Mapping[str, Any]], position: Any) -> Tuple[List[Entry], Entry]:
    """Remove the member at ``position`` for a later paste.

    The first member (position 0) can never be cut; valid range is ``1..n-1``.
    """
    pos = check_position(position, 1, len(entries) - 1, "cut")
    working = [dict(e) for e in entries]
    removed = working.pop(pos)
    return renumber(working), removed


def paste(entries: Sequence[Mapping[str, Any]], position: Any, entry: Mapping[str, Any]) -> List[Entry]:
    """Insert a previously cut ``entry``; valid range is ``1..n``."""
    pos = check_position(position, 1, len(entries), "paste")
    working = [dict(e) for e in entries]
    working.insert(pos, dict(entry))
    return renumber(working)


def _relocate(entries: Sequence[Mapping[str, Any]], src: int, dst: int) -> List[Entry]:
    working = [dict(e) for e in entries]
    moving = working.pop(src)
    working.insert(dst, moving)
    logger.debug("reorder.relocate src=%s dst=%s length=%s", src, dst, len(working))
    return renumber(working)


__all__ = [
    "renumber",
    "check_position",
    "insert",
    "remove",
    "move_up",
    "move_down",
    "move_to",
    "cut",
    "paste",
]
