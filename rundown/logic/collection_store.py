"""Ordered-collection store contract.

Stores persist projects and their two ordered member levels. The engine only
relies on ``load_siblings``/``save_siblings`` plus the project and lookup
helpers below; the referential backend additionally exposes positional
``pull``/``push`` primitives through ``PositionalCollectionStore``.

Store instances are constructed with an explicit SQLAlchemy ``Engine`` and
injected into the service; there is no module-level database handle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from rundown.logic.kinds import EntityKind


def utc_now() -> str:
    """RFC3339 timestamp in UTC with trailing 'Z' (seconds precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a single positional store call."""

    matched_count: int
    modified_count: int

    @property
    def confirmed(self) -> bool:
        return self.matched_count == 1 and self.modified_count == 1


class OrderedCollectionStore(ABC):
    backend: str = "abstract"

    # -- projects -----------------------------------------------------------

    @abstractmethod
    def count_projects(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def list_projects(self) -> List[Dict[str, Any]]:
        """Return ``{project_id, name, items: [item_id, ...]}`` for every project."""
        raise NotImplementedError

    @abstractmethod
    def find_project_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup; returns ``{project_id, name}`` or None."""
        raise NotImplementedError

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        """Return the populated project (items with nested elements) or None."""
        raise NotImplementedError

    @abstractmethod
    def create_project(self, project: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a new, empty project mapping and return it."""
        raise NotImplementedError

    @abstractmethod
    def delete_project(self, project_id: str) -> bool:
        """Delete a project and cascade to its items and elements."""
        raise NotImplementedError

    @abstractmethod
    def rename_project(self, project_id: str, name: str) -> bool:
        raise NotImplementedError

    # -- ordered members ----------------------------------------------------

    @abstractmethod
    def load_siblings(self, kind: EntityKind, parent_id: str) -> List[Dict[str, Any]]:
        """Return the ordered members of ``parent_id``.

        Raises ``ParentNotFound`` when the parent does not resolve.
        """
        raise NotImplementedError

    @abstractmethod
    def save_siblings(self, kind: EntityKind, parent_id: str, entries: Sequence[Dict[str, Any]]) -> None:
        """Make ``entries`` the persisted ordered member list of ``parent_id``."""
        raise NotImplementedError

    @abstractmethod
    def get_member(self, kind: EntityKind, member_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def find_parent(self, kind: EntityKind, member_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def rename_member(self, kind: EntityKind, member_id: str, name: str) -> bool:
        raise NotImplementedError


class PositionalCollectionStore(OrderedCollectionStore):
    """Store whose order lives in a parent-side reference list.

    There is no single-call "move within list" primitive: a move is a ``pull``
    followed by a ``push``, each in its own transaction.
    """

    @abstractmethod
    def pull(self, kind: EntityKind, member_id: str) -> WriteResult:
        """Remove ``member_id`` from every parent reference list containing it."""
        raise NotImplementedError

    @abstractmethod
    def push(self, kind: EntityKind, parent_id: str, member_id: str, position: int) -> WriteResult:
        """Insert the reference at ``position`` of ``parent_id``'s list."""
        raise NotImplementedError

    @abstractmethod
    def insert_document(self, kind: EntityKind, parent_id: str, entry: Dict[str, Any]) -> None:
        """Create a detached member record (not yet in any reference list)."""
        raise NotImplementedError

    @abstractmethod
    def delete_documents(self, kind: EntityKind, member_id: str) -> int:
        """Delete a member record and its descendants; return records removed."""
        raise NotImplementedError


__all__ = [
    "utc_now",
    "WriteResult",
    "OrderedCollectionStore",
    "PositionalCollectionStore",
]
