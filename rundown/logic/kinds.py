"""Entity kinds for the two ordered levels of the hierarchy.

A kind names the member record, its parent, and the tables/keys the stores
use for it. Services and stores are written once and parameterized by kind.
"""

from __future__ import annotations

from dataclasses import dataclass


INDEX_FIELD = "index"


@dataclass(frozen=True)
class EntityKind:
    name: str
    id_field: str
    parent_name: str
    parent_id_field: str
    # Field under which the parent document nests its members
    list_field: str
    member_table: str
    parent_table: str
    ref_table: str
    changed_event: str


ITEM = EntityKind(
    name="item",
    id_field="item_id",
    parent_name="project",
    parent_id_field="project_id",
    list_field="items",
    member_table="item",
    parent_table="project",
    ref_table="project_item_ref",
    changed_event="items.changed",
)

ELEMENT = EntityKind(
    name="element",
    id_field="element_id",
    parent_name="item",
    parent_id_field="item_id",
    list_field="elements",
    member_table="element",
    parent_table="item",
    ref_table="item_element_ref",
    changed_event="elements.changed",
)

__all__ = ["INDEX_FIELD", "EntityKind", "ITEM", "ELEMENT"]
