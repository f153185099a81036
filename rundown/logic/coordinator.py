"""Persistence sequencing for structural mutations.

The service computes the new sibling list with ``rundown.logic.reorder`` and
hands it to a coordinator, which decides how to get it into the store:

- ``WholeListCoordinator`` (embedded backend) writes the computed list with a
  single ``save_siblings`` call; there is nothing to sequence.
- ``PullPushCoordinator`` (referential backend) translates the change into
  pull/push calls and checks that each call affected exactly one document.
  A pull that is not confirmed aborts with ``PullFailed`` before any push; a
  push that is not confirmed raises ``PushFailed``. In both cases the member
  may already be detached from its parent and callers must re-read.

Use ``coordinator_for(store)`` to pick the right one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence
import logging

from rundown.logic.collection_store import (
    OrderedCollectionStore,
    PositionalCollectionStore,
    WriteResult,
)
from rundown.logic.errors import ParentNotFound, PullFailed, PushFailed
from rundown.logic.kinds import EntityKind

logger = logging.getLogger(__name__)


class ConsistencyCoordinator:
    def __init__(self, store: OrderedCollectionStore) -> None:
        self.store = store

    def commit_insert(
        self,
        kind: EntityKind,
        parent_id: str,
        after: Sequence[Dict[str, Any]],
        entry: Dict[str, Any],
        position: int,
    ) -> None:
        raise NotImplementedError

    def commit_remove(
        self,
        kind: EntityKind,
        parent_id: str,
        before: Sequence[Dict[str, Any]],
        after: Sequence[Dict[str, Any]],
        removed: Dict[str, Any],
        *,
        discard: bool,
    ) -> None:
        raise NotImplementedError

    def commit_relocate(
        self,
        kind: EntityKind,
        parent_id: str,
        before: Sequence[Dict[str, Any]],
        after: Sequence[Dict[str, Any]],
        member_id: str,
        destination: int,
    ) -> None:
        raise NotImplementedError

    def discard_detached(self, kind: EntityKind, member_id: str) -> None:
        """Delete a member record that is not attached to any parent list."""
        raise ParentNotFound(f"{kind.name} {member_id} not found", member_id=member_id)


class WholeListCoordinator(ConsistencyCoordinator):
    """Passthrough: the computed list replaces the stored one in one write."""

    def commit_insert(self, kind, parent_id, after, entry, position):
        self.store.save_siblings(kind, parent_id, after)

    def commit_remove(self, kind, parent_id, before, after, removed, *, discard):
        # Nested descendants live inside the removed entry, so dropping it
        # from the list deletes them too; nothing differs for a cut.
        self.store.save_siblings(kind, parent_id, after)

    def commit_relocate(self, kind, parent_id, before, after, member_id, destination):
        self.store.save_siblings(kind, parent_id, after)


class PullPushCoordinator(ConsistencyCoordinator):
    store: PositionalCollectionStore

    def commit_insert(self, kind, parent_id, after, entry, position):
        member_id = str(entry[kind.id_field])
        if self.store.get_member(kind, member_id) is None:
            self.store.insert_document(kind, parent_id, dict(entry))
        self._push(kind, parent_id, member_id, position)

    def commit_remove(self, kind, parent_id, before, after, removed, *, discard):
        member_id = str(removed[kind.id_field])
        self._pull(kind, parent_id, before, member_id)
        if discard:
            self.store.delete_documents(kind, member_id)

    def discard_detached(self, kind, member_id):
        self.store.delete_documents(kind, member_id)
        logger.info("coordinator.discard_detached kind=%s member_id=%s", kind.name, member_id)

    def commit_relocate(self, kind, parent_id, before, after, member_id, destination):
        if _ids(kind, before) == _ids(kind, after):
            logger.info(
                "coordinator.relocate_noop kind=%s parent_id=%s member_id=%s",
                kind.name,
                parent_id,
                member_id,
            )
            return
        self._pull(kind, parent_id, before, member_id)
        self._push(kind, parent_id, member_id, destination)

    # -- steps --------------------------------------------------------------

    def _pull(self, kind: EntityKind, parent_id: str, before: Sequence[Dict[str, Any]], member_id: str) -> None:
        occurrences = _ids(kind, before).count(member_id)
        if occurrences != 1:
            logger.error(
                "coordinator.pull_precheck_failed kind=%s parent_id=%s member_id=%s occurrences=%s",
                kind.name,
                parent_id,
                member_id,
                occurrences,
            )
            raise PullFailed(
                f"{kind.name} {member_id} appears {occurrences} times in {kind.parent_name} {parent_id}",
                parent_id=parent_id,
                member_id=member_id,
                occurrences=occurrences,
            )
        result = self.store.pull(kind, member_id)
        if not result.confirmed:
            logger.error(
                "coordinator.pull_failed kind=%s parent_id=%s member_id=%s matched=%s modified=%s",
                kind.name,
                parent_id,
                member_id,
                result.matched_count,
                result.modified_count,
            )
            raise PullFailed(
                f"pull of {kind.name} {member_id} was not confirmed",
                **_result_context(parent_id, member_id, result),
            )

    def _push(self, kind: EntityKind, parent_id: str, member_id: str, position: int) -> None:
        result = self.store.push(kind, parent_id, member_id, position)
        if not result.confirmed:
            logger.error(
                "coordinator.push_failed kind=%s parent_id=%s member_id=%s position=%s matched=%s modified=%s",
                kind.name,
                parent_id,
                member_id,
                position,
                result.matched_count,
                result.modified_count,
            )
            raise PushFailed(
                f"push of {kind.name} {member_id} at {position} was not confirmed",
                **_result_context(parent_id, member_id, result),
            )


def _ids(kind: EntityKind, entries: Sequence[Dict[str, Any]]) -> List[str]:
    return [str(entry.get(kind.id_field)) for entry in entries]


def _result_context(parent_id: str, member_id: str, result: WriteResult) -> Dict[str, Any]:
    return {
        "parent_id": parent_id,
        "member_id": member_id,
        "matched_count": result.matched_count,
        "modified_count": result.modified_count,
    }


def coordinator_for(store: OrderedCollectionStore) -> ConsistencyCoordinator:
    if isinstance(store, PositionalCollectionStore):
        return PullPushCoordinator(store)
    return WholeListCoordinator(store)


__all__ = [
    "ConsistencyCoordinator",
    "WholeListCoordinator",
    "PullPushCoordinator",
    "coordinator_for",
]
