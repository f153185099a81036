"""Referential project store.

Projects, items and elements are separate rows; items and elements carry a
back-reference to their parent. The order of a parent's members is kept in a
parent-side reference table (``project_item_ref`` / ``item_element_ref``)
whose ``position`` column is the member's zero-based index.

Order changes go through two positional primitives, each in its own
transaction:

- ``pull`` removes a member reference from every parent list that holds it;
- ``push`` inserts a reference at a position, shifting later ones down.

A move is therefore a pull followed by a push with nothing holding the two
together. If the push never happens the member stays detached: its record and
back-reference survive but no parent list points at it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
import json
import logging

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

from rundown.logic.collection_store import PositionalCollectionStore, WriteResult, utc_now
from rundown.logic.errors import ParentNotFound, PullFailed, PushFailed
from rundown.logic.kinds import ELEMENT, INDEX_FIELD, ITEM, EntityKind

logger = logging.getLogger(__name__)

_COLUMNS = {
    ITEM.name: ("item_id", "project_id", "name", "expanded", "options", "created_at", "updated_at"),
    ELEMENT.name: ("element_id", "item_id", "type", "name", "payload", "created_at", "updated_at"),
}

# Element fields stored in dedicated columns; everything else goes to payload
_ELEMENT_RESERVED = {"element_id", "item_id", "type", "name", "created_at", "updated_at", INDEX_FIELD}


class ReferentialCollectionStore(PositionalCollectionStore):
    backend = "referential"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # -- row mapping --------------------------------------------------------

    @staticmethod
    def _row_to_entry(kind: EntityKind, row: Any, position: Optional[int]) -> Dict[str, Any]:
        data = dict(row)
        data.pop("ref_position", None)
        if kind == ITEM:
            data["expanded"] = bool(data.get("expanded"))
            data["options"] = bool(data.get("options"))
        else:
            payload = json.loads(data.pop("payload") or "{}")
            data = {**payload, **data}
        data[INDEX_FIELD] = position
        return data

    @staticmethod
    def _entry_to_params(kind: EntityKind, parent_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        if kind == ITEM:
            return {
                "item_id": entry["item_id"],
                "project_id": parent_id,
                "name": entry.get("name"),
                "expanded": bool(entry.get("expanded", False)),
                "options": bool(entry.get("options", False)),
                "created_at": entry.get("created_at") or now,
                "updated_at": now,
            }
        payload = {k: v for k, v in entry.items() if k not in _ELEMENT_RESERVED}
        return {
            "element_id": entry["element_id"],
            "item_id": parent_id,
            "type": entry.get("type"),
            "name": entry.get("name", ""),
            "payload": json.dumps(payload, ensure_ascii=False),
            "created_at": entry.get("created_at") or now,
            "updated_at": now,
        }

    # -- low-level reads ----------------------------------------------------

    @staticmethod
    def _parent_exists(conn: Connection, kind: EntityKind, parent_id: str) -> bool:
        row = conn.execute(
            sql_text(f"SELECT 1 FROM {kind.parent_table} WHERE {kind.parent_id_field} = :pid"),
            {"pid": parent_id},
        ).fetchone()
        return row is not None

    def _load_members(self, conn: Connection, kind: EntityKind, parent_id: str) -> List[Dict[str, Any]]:
        cols = ", ".join(f"m.{c}" for c in _COLUMNS[kind.name])
        rows = conn.execute(
            sql_text(
                f"SELECT {cols}, r.position AS ref_position FROM {kind.ref_table} r "
                f"JOIN {kind.member_table} m ON m.{kind.id_field} = r.{kind.id_field} "
                f"WHERE r.{kind.parent_id_field} = :pid "
                f"ORDER BY r.position ASC, r.{kind.id_field} ASC"
            ),
            {"pid": parent_id},
        ).mappings().all()
        entries = [self._row_to_entry(kind, row, int(row["ref_position"])) for row in rows]
        if kind == ITEM:
            for entry in entries:
                entry[ELEMENT.list_field] = self._load_members(conn, ELEMENT, entry["item_id"])
        return entries

    @staticmethod
    def _renumber(conn: Connection, kind: EntityKind, parent_id: str) -> None:
        """Rewrite the parent's reference positions as 0..n-1 in current order."""
        rows = conn.execute(
            sql_text(
                f"SELECT {kind.id_field}, position FROM {kind.ref_table} "
                f"WHERE {kind.parent_id_field} = :pid ORDER BY position ASC, {kind.id_field} ASC"
            ),
            {"pid": parent_id},
        ).fetchall()
        for rank, row in enumerate(rows):
            if int(row[1]) == rank:
                continue
            conn.execute(
                sql_text(
                    f"UPDATE {kind.ref_table} SET position = :pos "
                    f"WHERE {kind.parent_id_field} = :pid AND {kind.id_field} = :mid"
                ),
                {"pos": rank, "pid": parent_id, "mid": row[0]},
            )

    def _insert_row(self, conn: Connection, kind: EntityKind, parent_id: str, entry: Dict[str, Any]) -> None:
        cols = _COLUMNS[kind.name]
        conn.execute(
            sql_text(
                f"INSERT INTO {kind.member_table} ({', '.join(cols)}) "
                f"VALUES ({', '.join(':' + c for c in cols)})"
            ),
            self._entry_to_params(kind, parent_id, entry),
        )

    # -- projects -----------------------------------------------------------

    def count_projects(self) -> int:
        with self._engine.connect() as conn:
            row = conn.execute(sql_text("SELECT COUNT(*) FROM project")).fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def list_projects(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                sql_text("SELECT project_id, name FROM project ORDER BY created_at ASC, project_id ASC")
            ).fetchall()
            out: List[Dict[str, Any]] = []
            for row in rows:
                refs = conn.execute(
                    sql_text(
                        "SELECT item_id FROM project_item_ref WHERE project_id = :pid "
                        "ORDER BY position ASC, item_id ASC"
                    ),
                    {"pid": row[0]},
                ).scalars().all()
                out.append({"project_id": str(row[0]), "name": str(row[1]), "items": [str(r) for r in refs]})
        return out

    def find_project_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        wanted = str(name).lower()
        with self._engine.connect() as conn:
            rows = conn.execute(sql_text("SELECT project_id, name FROM project")).fetchall()
        for row in rows:
            if str(row[1]).lower() == wanted:
                return {"project_id": str(row[0]), "name": str(row[1])}
        return None

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    "SELECT project_id, name, settings, created_at, updated_at FROM project "
                    "WHERE project_id = :pid"
                ),
                {"pid": project_id},
            ).mappings().fetchone()
            if row is None:
                return None
            project = dict(row)
            project["settings"] = json.loads(project.get("settings") or "{}")
            project[ITEM.list_field] = self._load_members(conn, ITEM, project_id)
        return project

    def create_project(self, project: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            conn.execute(
                sql_text(
                    "INSERT INTO project (project_id, name, settings, created_at, updated_at) "
                    "VALUES (:pid, :name, :settings, :created, :updated)"
                ),
                {
                    "pid": project["project_id"],
                    "name": project["name"],
                    "settings": json.dumps(project.get("settings") or {}, ensure_ascii=False),
                    "created": project["created_at"],
                    "updated": project["updated_at"],
                },
            )
        logger.info("referential.project_created project_id=%s", project["project_id"])
        return {**project, ITEM.list_field: []}

    def delete_project(self, project_id: str) -> bool:
        with self._engine.begin() as conn:
            item_ids = conn.execute(
                sql_text("SELECT item_id FROM item WHERE project_id = :pid"),
                {"pid": project_id},
            ).scalars().all()
            for item_id in item_ids:
                self._delete_item_rows(conn, str(item_id))
            conn.execute(
                sql_text("DELETE FROM project_item_ref WHERE project_id = :pid"),
                {"pid": project_id},
            )
            result = conn.execute(
                sql_text("DELETE FROM project WHERE project_id = :pid"),
                {"pid": project_id},
            )
        logger.info("referential.project_deleted project_id=%s items=%s", project_id, len(item_ids))
        return bool(result.rowcount)

    def rename_project(self, project_id: str, name: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                sql_text("UPDATE project SET name = :name, updated_at = :ts WHERE project_id = :pid"),
                {"name": name, "ts": utc_now(), "pid": project_id},
            )
        return bool(result.rowcount)

    # -- ordered members ----------------------------------------------------

    def load_siblings(self, kind: EntityKind, parent_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            if not self._parent_exists(conn, kind, parent_id):
                raise ParentNotFound(f"{kind.parent_name} {parent_id} not found", parent_id=parent_id)
            return self._load_members(conn, kind, parent_id)

    def save_siblings(self, kind: EntityKind, parent_id: str, entries: Sequence[Dict[str, Any]]) -> None:
        """Rewrite the parent's reference list using pull/push calls only.

        Walks the target order and, wherever the stored reference at a rank
        differs, pulls the wanted member (if attached) and pushes it at that
        rank. Members that are not in ``entries`` are pulled at the end.
        Records that do not exist yet are inserted detached before the push.
        """
        current = [e[kind.id_field] for e in self.load_siblings(kind, parent_id)]
        target = [e[kind.id_field] for e in entries]
        for rank, member_id in enumerate(target):
            if rank < len(current) and current[rank] == member_id:
                continue
            if member_id in current:
                self._expect(self.pull(kind, member_id), PullFailed, kind, member_id)
                current.remove(member_id)
            elif self.get_member(kind, member_id) is None:
                self.insert_document(kind, parent_id, dict(entries[rank]))
            self._expect(self.push(kind, parent_id, member_id, rank), PushFailed, kind, member_id)
            current.insert(rank, member_id)
        for member_id in current[len(target):]:
            self._expect(self.pull(kind, member_id), PullFailed, kind, member_id)

    @staticmethod
    def _expect(result: WriteResult, error: type, kind: EntityKind, member_id: str) -> None:
        if not result.confirmed:
            raise error(
                f"{kind.name} {member_id}: expected one matched/modified document",
                matched_count=result.matched_count,
                modified_count=result.modified_count,
            )

    def get_member(self, kind: EntityKind, member_id: str) -> Optional[Dict[str, Any]]:
        cols = ", ".join(f"m.{c}" for c in _COLUMNS[kind.name])
        with self._engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    f"SELECT {cols}, r.position AS ref_position FROM {kind.member_table} m "
                    f"LEFT JOIN {kind.ref_table} r ON r.{kind.id_field} = m.{kind.id_field} "
                    f"WHERE m.{kind.id_field} = :mid"
                ),
                {"mid": member_id},
            ).mappings().fetchone()
            if row is None:
                return None
            position = int(row["ref_position"]) if row["ref_position"] is not None else None
            entry = self._row_to_entry(kind, row, position)
            if kind == ITEM:
                entry[ELEMENT.list_field] = self._load_members(conn, ELEMENT, member_id)
        return entry

    def find_parent(self, kind: EntityKind, member_id: str) -> Optional[str]:
        with self._engine.connect() as conn:
            row = conn.execute(
                sql_text(
                    f"SELECT {kind.parent_id_field} FROM {kind.member_table} WHERE {kind.id_field} = :mid"
                ),
                {"mid": member_id},
            ).fetchone()
        return str(row[0]) if row and row[0] is not None else None

    def rename_member(self, kind: EntityKind, member_id: str, name: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                sql_text(
                    f"UPDATE {kind.member_table} SET name = :name, updated_at = :ts "
                    f"WHERE {kind.id_field} = :mid"
                ),
                {"name": name, "ts": utc_now(), "mid": member_id},
            )
        return bool(result.rowcount)

    # -- positional primitives ----------------------------------------------

    def pull(self, kind: EntityKind, member_id: str) -> WriteResult:
        with self._engine.begin() as conn:
            parents = sorted(
                {
                    str(p)
                    for p in conn.execute(
                        sql_text(
                            f"SELECT {kind.parent_id_field} FROM {kind.ref_table} "
                            f"WHERE {kind.id_field} = :mid"
                        ),
                        {"mid": member_id},
                    ).scalars().all()
                }
            )
            if not parents:
                logger.info("referential.pull kind=%s member_id=%s matched=0", kind.name, member_id)
                return WriteResult(matched_count=0, modified_count=0)
            deleted = conn.execute(
                sql_text(f"DELETE FROM {kind.ref_table} WHERE {kind.id_field} = :mid"),
                {"mid": member_id},
            ).rowcount
            for parent_id in parents:
                self._renumber(conn, kind, parent_id)
        result = WriteResult(matched_count=len(parents), modified_count=len(parents) if deleted else 0)
        logger.info(
            "referential.pull kind=%s member_id=%s parents=%s matched=%s modified=%s",
            kind.name,
            member_id,
            parents,
            result.matched_count,
            result.modified_count,
        )
        return result

    def push(self, kind: EntityKind, parent_id: str, member_id: str, position: int) -> WriteResult:
        with self._engine.begin() as conn:
            if not self._parent_exists(conn, kind, parent_id):
                return WriteResult(matched_count=0, modified_count=0)
            already = conn.execute(
                sql_text(
                    f"SELECT 1 FROM {kind.ref_table} "
                    f"WHERE {kind.parent_id_field} = :pid AND {kind.id_field} = :mid"
                ),
                {"pid": parent_id, "mid": member_id},
            ).fetchone()
            member = conn.execute(
                sql_text(f"SELECT 1 FROM {kind.member_table} WHERE {kind.id_field} = :mid"),
                {"mid": member_id},
            ).fetchone()
            if already is not None or member is None:
                return WriteResult(matched_count=1, modified_count=0)
            count_row = conn.execute(
                sql_text(f"SELECT COUNT(*) FROM {kind.ref_table} WHERE {kind.parent_id_field} = :pid"),
                {"pid": parent_id},
            ).fetchone()
            count = int(count_row[0]) if count_row and count_row[0] is not None else 0
            # Out-of-range positions append, like an array $position past the end
            pos = max(0, min(int(position), count))
            conn.execute(
                sql_text(
                    f"UPDATE {kind.ref_table} SET position = position + 1 "
                    f"WHERE {kind.parent_id_field} = :pid AND position >= :pos"
                ),
                {"pid": parent_id, "pos": pos},
            )
            conn.execute(
                sql_text(
                    f"INSERT INTO {kind.ref_table} ({kind.parent_id_field}, {kind.id_field}, position) "
                    f"VALUES (:pid, :mid, :pos)"
                ),
                {"pid": parent_id, "mid": member_id, "pos": pos},
            )
            conn.execute(
                sql_text(
                    f"UPDATE {kind.member_table} SET {kind.parent_id_field} = :pid, updated_at = :ts "
                    f"WHERE {kind.id_field} = :mid"
                ),
                {"pid": parent_id, "ts": utc_now(), "mid": member_id},
            )
            self._renumber(conn, kind, parent_id)
        logger.info(
            "referential.push kind=%s parent_id=%s member_id=%s position=%s",
            kind.name,
            parent_id,
            member_id,
            pos,
        )
        return WriteResult(matched_count=1, modified_count=1)

    def insert_document(self, kind: EntityKind, parent_id: str, entry: Dict[str, Any]) -> None:
        """Insert a detached member row.

        Items bring their nested elements along: those are inserted and
        attached to the new item in the same transaction.
        """
        with self._engine.begin() as conn:
            self._insert_row(conn, kind, parent_id, entry)
            if kind == ITEM:
                for rank, element in enumerate(entry.get(ELEMENT.list_field) or []):
                    self._insert_row(conn, ELEMENT, entry["item_id"], element)
                    conn.execute(
                        sql_text(
                            "INSERT INTO item_element_ref (item_id, element_id, position) "
                            "VALUES (:pid, :mid, :pos)"
                        ),
                        {"pid": entry["item_id"], "mid": element["element_id"], "pos": rank},
                    )

    def delete_documents(self, kind: EntityKind, member_id: str) -> int:
        with self._engine.begin() as conn:
            if kind == ITEM:
                removed = self._delete_item_rows(conn, member_id)
            else:
                conn.execute(
                    sql_text("DELETE FROM item_element_ref WHERE element_id = :mid"),
                    {"mid": member_id},
                )
                removed = int(
                    conn.execute(
                        sql_text("DELETE FROM element WHERE element_id = :mid"),
                        {"mid": member_id},
                    ).rowcount
                    or 0
                )
        logger.info("referential.delete_documents kind=%s member_id=%s removed=%s", kind.name, member_id, removed)
        return removed

    @staticmethod
    def _delete_item_rows(conn: Connection, item_id: str) -> int:
        conn.execute(sql_text("DELETE FROM item_element_ref WHERE item_id = :iid"), {"iid": item_id})
        elements = conn.execute(sql_text("DELETE FROM element WHERE item_id = :iid"), {"iid": item_id}).rowcount
        conn.execute(sql_text("DELETE FROM project_item_ref WHERE item_id = :iid"), {"iid": item_id})
        items = conn.execute(sql_text("DELETE FROM item WHERE item_id = :iid"), {"iid": item_id}).rowcount
        return int(items or 0) + int(elements or 0)


__all__ = ["ReferentialCollectionStore"]
