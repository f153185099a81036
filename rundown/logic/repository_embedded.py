"""Embedded-array project store.

Each project is one row of ``project_document`` whose ``document`` column
holds the whole tree as JSON: settings plus ``items[]``, each item carrying
its own ``elements[]``. Every write replaces the document in a single
``UPDATE``, so a mutation is either fully visible to the next read or not at
all. Two concurrent writers on the same project race; the last write wins.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

from rundown.logic.collection_store import OrderedCollectionStore, utc_now
from rundown.logic.errors import ParentNotFound
from rundown.logic.kinds import ELEMENT, ITEM, EntityKind

logger = logging.getLogger(__name__)


class EmbeddedCollectionStore(OrderedCollectionStore):
    backend = "embedded"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # -- document helpers ---------------------------------------------------

    @staticmethod
    def _read_document(conn: Connection, project_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            sql_text("SELECT document FROM project_document WHERE project_id = :pid"),
            {"pid": project_id},
        ).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    @staticmethod
    def _write_document(conn: Connection, project_id: str, document: Dict[str, Any]) -> int:
        document["updated_at"] = utc_now()
        result = conn.execute(
            sql_text(
                "UPDATE project_document SET name = :name, document = :doc, updated_at = :ts "
                "WHERE project_id = :pid"
            ),
            {
                "pid": project_id,
                "name": document.get("name"),
                "doc": json.dumps(document, ensure_ascii=False),
                "ts": document["updated_at"],
            },
        )
        return int(result.rowcount or 0)

    @staticmethod
    def _all_documents(conn: Connection) -> List[Dict[str, Any]]:
        rows = conn.execute(
            sql_text("SELECT document FROM project_document ORDER BY created_at ASC, project_id ASC")
        ).fetchall()
        return [json.loads(r[0]) for r in rows]

    def _locate(
        self, conn: Connection, kind: EntityKind, member_id: str
    ) -> Optional[Tuple[Dict[str, Any], List[Dict[str, Any]], int, str]]:
        """Find ``member_id`` in any document.

        Returns ``(document, containing_list, position, parent_id)``; the list
        is the live list inside ``document`` so callers can edit it in place.
        """
        for document in self._all_documents(conn):
            for item_pos, item in enumerate(document.get("items", [])):
                if kind == ITEM and item.get(ITEM.id_field) == member_id:
                    return document, document["items"], item_pos, str(document["project_id"])
                if kind == ELEMENT:
                    elements = item.setdefault("elements", [])
                    for el_pos, element in enumerate(elements):
                        if element.get(ELEMENT.id_field) == member_id:
                            return document, elements, el_pos, str(item[ITEM.id_field])
        return None

    def _sibling_container(
        self, conn: Connection, kind: EntityKind, parent_id: str
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        if kind == ITEM:
            document = self._read_document(conn, parent_id)
            if document is None:
                raise ParentNotFound(f"project {parent_id} not found", parent_id=parent_id)
            return document, document.setdefault("items", [])
        located = self._locate(conn, ITEM, parent_id)
        if located is None:
            raise ParentNotFound(f"item {parent_id} not found", parent_id=parent_id)
        document, items, pos, _ = located
        return document, items[pos].setdefault("elements", [])

    # -- projects -----------------------------------------------------------

    def count_projects(self) -> int:
        with self._engine.connect() as conn:
            row = conn.execute(sql_text("SELECT COUNT(*) FROM project_document")).fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def list_projects(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            documents = self._all_documents(conn)
        return [
            {
                "project_id": d["project_id"],
                "name": d["name"],
                "items": [i[ITEM.id_field] for i in d.get("items", [])],
            }
            for d in documents
        ]

    def find_project_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        wanted = str(name).lower()
        with self._engine.connect() as conn:
            rows = conn.execute(sql_text("SELECT project_id, name FROM project_document")).fetchall()
        for row in rows:
            if str(row[1]).lower() == wanted:
                return {"project_id": str(row[0]), "name": str(row[1])}
        return None

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            return self._read_document(conn, project_id)

    def create_project(self, project: Dict[str, Any]) -> Dict[str, Any]:
        document = {**project, "items": list(project.get("items", []))}
        with self._engine.begin() as conn:
            conn.execute(
                sql_text(
                    "INSERT INTO project_document (project_id, name, document, created_at, updated_at) "
                    "VALUES (:pid, :name, :doc, :created, :updated)"
                ),
                {
                    "pid": document["project_id"],
                    "name": document["name"],
                    "doc": json.dumps(document, ensure_ascii=False),
                    "created": document["created_at"],
                    "updated": document["updated_at"],
                },
            )
        logger.info("embedded.project_created project_id=%s", document["project_id"])
        return document

    def delete_project(self, project_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                sql_text("DELETE FROM project_document WHERE project_id = :pid"),
                {"pid": project_id},
            )
        return bool(result.rowcount)

    def rename_project(self, project_id: str, name: str) -> bool:
        with self._engine.begin() as conn:
            document = self._read_document(conn, project_id)
            if document is None:
                return False
            document["name"] = name
            return self._write_document(conn, project_id, document) == 1

    # -- ordered members ----------------------------------------------------

    def load_siblings(self, kind: EntityKind, parent_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            _, siblings = self._sibling_container(conn, kind, parent_id)
        return [dict(entry) for entry in siblings]

    def save_siblings(self, kind: EntityKind, parent_id: str, entries: Sequence[Dict[str, Any]]) -> None:
        with self._engine.begin() as conn:
            document, siblings = self._sibling_container(conn, kind, parent_id)
            siblings[:] = [dict(entry) for entry in entries]
            written = self._write_document(conn, document["project_id"], document)
        logger.info(
            "embedded.save_siblings kind=%s parent_id=%s count=%s written=%s",
            kind.name,
            parent_id,
            len(entries),
            written,
        )

    def get_member(self, kind: EntityKind, member_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            located = self._locate(conn, kind, member_id)
        if located is None:
            return None
        _, siblings, pos, _ = located
        return dict(siblings[pos])

    def find_parent(self, kind: EntityKind, member_id: str) -> Optional[str]:
        with self._engine.connect() as conn:
            located = self._locate(conn, kind, member_id)
        return located[3] if located is not None else None

    def rename_member(self, kind: EntityKind, member_id: str, name: str) -> bool:
        with self._engine.begin() as conn:
            located = self._locate(conn, kind, member_id)
            if located is None:
                return False
            document, siblings, pos, _ = located
            siblings[pos]["name"] = name
            siblings[pos]["updated_at"] = utc_now()
            return self._write_document(conn, document["project_id"], document) == 1


__all__ = ["EmbeddedCollectionStore"]
