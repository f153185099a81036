"""Ordered-collection service for projects, items and elements.

One implementation serves both member levels (``ITEM`` under a project,
``ELEMENT`` under an item) and both storage backends. Every structural
operation follows the same path:

1. load the current sibling list from the store;
2. compute the new list with ``rundown.logic.reorder``;
3. persist it through the backend's coordinator;
4. notify subscribers once, only after the write succeeded.

Failures surface as ``RundownError`` subclasses; nothing is retried here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
import logging
import uuid

from rundown.logic import reorder
from rundown.logic.collection_store import OrderedCollectionStore, utc_now
from rundown.logic.coordinator import coordinator_for
from rundown.logic.errors import CapacityExceeded, NameConflict, ParentNotFound, ValidationError
from rundown.logic.events import PROJECTS_CHANGED, BufferedChangeNotifier, ChangeNotifier
from rundown.logic.kinds import ELEMENT, INDEX_FIELD, ITEM, EntityKind
from rundown.logic.validation import is_usable_name, require_name, validate_element_template
from rundown.models.project_settings import merged_settings

logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "New Example Item"
DEFAULT_MAX_PROJECTS = 50

# Keys a caller may not smuggle into an element's opaque payload
_ELEMENT_MANAGED_KEYS = {"_id", "element_id", "item_id", INDEX_FIELD, "created_at", "updated_at"}


class RundownService:
    def __init__(
        self,
        store: OrderedCollectionStore,
        notifier: Optional[ChangeNotifier] = None,
        *,
        max_projects: int = DEFAULT_MAX_PROJECTS,
        seed_example_item: bool = True,
    ) -> None:
        self.store = store
        self.coordinator = coordinator_for(store)
        self.notifier = notifier if notifier is not None else BufferedChangeNotifier()
        self.max_projects = int(max_projects)
        self.seed_example_item = bool(seed_example_item)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self) -> List[Dict[str, Any]]:
        return self.store.list_projects()

    def get_project(self, project_id: str) -> Dict[str, Any]:
        project = self.store.get_project(project_id)
        if project is None:
            raise ParentNotFound(f"project {project_id} not found", parent_id=project_id)
        return project

    def project_name_exists(self, name: str) -> Optional[Dict[str, Any]]:
        """Return ``{project_id, name}`` of a case-insensitive match, or None."""
        return self.store.find_project_by_name(require_name(name))

    def create_project(
        self,
        name: Any,
        overwrite: bool = False,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a project, optionally replacing a same-named one.

        The ceiling is checked before the name, and applies even when
        ``overwrite`` would replace an existing project.
        """
        project_name = require_name(name)
        count = self.store.count_projects()
        if count >= self.max_projects:
            raise CapacityExceeded(
                f"Maximum is {self.max_projects} projects, please remove some to add new",
                limit=self.max_projects,
            )
        existing = self.store.find_project_by_name(project_name)
        if existing is not None:
            if not overwrite:
                raise NameConflict(
                    f"project name {project_name!r} already exists",
                    project_id=existing["project_id"],
                )
            logger.info("service.project_overwrite project_id=%s name=%s", existing["project_id"], project_name)
            self.store.delete_project(existing["project_id"])

        now = utc_now()
        project_id = str(uuid.uuid4())
        self.store.create_project(
            {
                "project_id": project_id,
                "name": project_name,
                "settings": merged_settings(settings),
                "created_at": now,
                "updated_at": now,
                ITEM.list_field: [],
            }
        )
        if self.seed_example_item:
            self._insert(ITEM, project_id, 0, self._new_item(project_id, {"name": DEFAULT_ITEM_NAME}))
        self.notifier.notify_changed(project_id, PROJECTS_CHANGED)
        return self.get_project(project_id)

    def delete_project(self, project_id: str) -> Dict[str, Any]:
        if not self.store.delete_project(project_id):
            raise ParentNotFound(f"project {project_id} not found", parent_id=project_id)
        self.notifier.notify_changed(project_id, PROJECTS_CHANGED)
        return {"project_id": project_id, "deleted": True}

    def rename_project(self, project_id: str, new_name: Any) -> Dict[str, Any]:
        name = require_name(new_name, "new_name")
        if not self.store.rename_project(project_id, name):
            raise ParentNotFound(f"project {project_id} not found", parent_id=project_id)
        return {"project_id": project_id, "name": name}

    # ------------------------------------------------------------------
    # Members (items and elements)
    # ------------------------------------------------------------------

    def get_member(self, kind: EntityKind, member_id: str) -> Dict[str, Any]:
        member = self.store.get_member(kind, member_id)
        if member is None:
            raise ParentNotFound(f"{kind.name} {member_id} not found", member_id=member_id)
        return member

    def rename_member(self, kind: EntityKind, member_id: str, name: Any) -> Dict[str, Any]:
        new_name = require_name(name)
        if not self.store.rename_member(kind, member_id, new_name):
            raise ParentNotFound(f"{kind.name} {member_id} not found", member_id=member_id)
        return self.get_member(kind, member_id)

    def create_member(
        self,
        kind: EntityKind,
        parent_id: str,
        position: Any = None,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create an item or element at ``position`` (front of the list by default)."""
        if position is None:
            position = 0
        if kind == ITEM:
            entry = self._new_item(parent_id, payload or {})
        else:
            entry = self._new_element(parent_id, validate_element_template(payload))
        after = self._insert(kind, parent_id, position, entry)
        self.notifier.notify_changed(parent_id, kind.changed_event)
        logger.info(
            "service.create_member kind=%s parent_id=%s member_id=%s position=%s",
            kind.name,
            parent_id,
            entry[kind.id_field],
            position,
        )
        state = self._state(kind, parent_id)
        state["created"] = after[position]
        return state

    def delete_member(self, kind: EntityKind, member_id: str) -> Dict[str, Any]:
        parent_id = self.store.find_parent(kind, member_id)
        if parent_id is None:
            raise ParentNotFound(f"{kind.name} {member_id} not found", member_id=member_id)
        before = self.store.load_siblings(kind, parent_id)
        position = _position_of(kind, before, member_id)
        if position is None:
            # Detached by an earlier cut; the list itself does not change
            self.coordinator.discard_detached(kind, member_id)
            return self._state(kind, parent_id)
        after, removed = reorder.remove(before, position)
        self.coordinator.commit_remove(kind, parent_id, before, after, removed, discard=True)
        self.notifier.notify_changed(parent_id, kind.changed_event)
        return self._state(kind, parent_id)

    def move_up(self, kind: EntityKind, parent_id: str, position: Any) -> Dict[str, Any]:
        before = self.store.load_siblings(kind, parent_id)
        after = reorder.move_up(before, position)
        return self._relocate(kind, parent_id, before, after, position, position - 1)

    def move_down(self, kind: EntityKind, parent_id: str, position: Any) -> Dict[str, Any]:
        before = self.store.load_siblings(kind, parent_id)
        after = reorder.move_down(before, position)
        return self._relocate(kind, parent_id, before, after, position, position + 1)

    def move(self, kind: EntityKind, parent_id: str, from_position: Any, to_position: Any) -> Dict[str, Any]:
        before = self.store.load_siblings(kind, parent_id)
        after = reorder.move_to(before, from_position, to_position)
        return self._relocate(kind, parent_id, before, after, from_position, to_position)

    def cut(self, kind: EntityKind, parent_id: str, position: Any) -> Dict[str, Any]:
        """Take a member out of the list and return it as ``removed``.

        On the referential backend the record survives detached so a later
        paste can re-attach it by id.
        """
        before = self.store.load_siblings(kind, parent_id)
        after, removed = reorder.cut(before, position)
        self.coordinator.commit_remove(kind, parent_id, before, after, removed, discard=False)
        self.notifier.notify_changed(parent_id, kind.changed_event)
        state = self._state(kind, parent_id)
        state["removed"] = removed
        return state

    def paste(self, kind: EntityKind, parent_id: str, position: Any, entry: Any) -> Dict[str, Any]:
        if not isinstance(entry, Mapping):
            raise ValidationError("entry is required", field="entry")
        before = self.store.load_siblings(kind, parent_id)
        prepared = self._prepare_paste(kind, parent_id, dict(entry))
        after = reorder.paste(before, position, prepared)
        self.coordinator.commit_insert(kind, parent_id, after, after[position], position)
        self.notifier.notify_changed(parent_id, kind.changed_event)
        return self._state(kind, parent_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert(self, kind: EntityKind, parent_id: str, position: Any, entry: Dict[str, Any]) -> List[Dict[str, Any]]:
        before = self.store.load_siblings(kind, parent_id)
        after = reorder.insert(before, position, entry)
        self.coordinator.commit_insert(kind, parent_id, after, after[position], position)
        return after

    def _relocate(
        self,
        kind: EntityKind,
        parent_id: str,
        before: List[Dict[str, Any]],
        after: List[Dict[str, Any]],
        source: int,
        destination: int,
    ) -> Dict[str, Any]:
        member_id = str(before[source][kind.id_field])
        self.coordinator.commit_relocate(kind, parent_id, before, after, member_id, destination)
        if _ids(kind, before) != _ids(kind, after):
            self.notifier.notify_changed(parent_id, kind.changed_event)
        logger.info(
            "service.relocate kind=%s parent_id=%s member_id=%s from=%s to=%s",
            kind.name,
            parent_id,
            member_id,
            source,
            destination,
        )
        return self._state(kind, parent_id)

    def _state(self, kind: EntityKind, parent_id: str) -> Dict[str, Any]:
        return {
            "parent_id": parent_id,
            "kind": kind.name,
            "members": self.store.load_siblings(kind, parent_id),
        }

    def _new_item(self, project_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Build an item entry; template elements are copied with fresh ids."""
        now = utc_now()
        item_id = str(uuid.uuid4())
        name = payload.get("name")
        elements = [
            self._new_element(item_id, validate_element_template(template))
            for template in (payload.get(ELEMENT.list_field) or [])
        ]
        return {
            "item_id": item_id,
            "project_id": project_id,
            "name": str(name).strip() if is_usable_name(name) else DEFAULT_ITEM_NAME,
            "expanded": bool(payload.get("expanded", True)),
            "options": bool(payload.get("options", False)),
            ELEMENT.list_field: reorder.renumber(elements),
            "created_at": now,
            "updated_at": now,
        }

    @staticmethod
    def _new_element(item_id: str, template: Mapping[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        opaque = {k: v for k, v in template.items() if k not in _ELEMENT_MANAGED_KEYS}
        return {
            **opaque,
            "element_id": str(uuid.uuid4()),
            "item_id": item_id,
            "type": template["type"],
            "name": template.get("name") or "",
            "created_at": now,
            "updated_at": now,
        }

    def _prepare_paste(self, kind: EntityKind, parent_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve a clipboard entry into something insertable under ``parent_id``.

        - an id of a detached record re-attaches that record;
        - an id of a record that is still attached somewhere is rejected;
        - no id (or an unknown one) creates a new record from the payload.
        """
        member_id = entry.get(kind.id_field)
        if member_id:
            existing = self.store.get_member(kind, str(member_id))
            if existing is not None:
                if existing.get(INDEX_FIELD) is not None:
                    raise ValidationError(
                        f"{kind.name} {member_id} is still attached; cut it first",
                        member_id=member_id,
                    )
                existing[kind.parent_id_field] = parent_id
                return existing
        if kind == ITEM:
            fresh = self._new_item(parent_id, entry)
        else:
            fresh = self._new_element(parent_id, validate_element_template(entry))
        if member_id:
            # A clipboard entry from an embedded cut: keep the ids it carried
            fresh[kind.id_field] = str(member_id)
            if kind == ITEM:
                source = entry.get(ELEMENT.list_field) or []
                for element, original in zip(fresh[ELEMENT.list_field], source):
                    if original.get("element_id"):
                        element["element_id"] = str(original["element_id"])
                    element["item_id"] = str(member_id)
        return fresh


def _ids(kind: EntityKind, entries: List[Dict[str, Any]]) -> List[str]:
    return [str(e.get(kind.id_field)) for e in entries]


def _position_of(kind: EntityKind, entries: List[Dict[str, Any]], member_id: str) -> Optional[int]:
    for pos, entry in enumerate(entries):
        if str(entry.get(kind.id_field)) == str(member_id):
            return pos
    return None


__all__ = ["RundownService", "DEFAULT_ITEM_NAME", "DEFAULT_MAX_PROJECTS"]
