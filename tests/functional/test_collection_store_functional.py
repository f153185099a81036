"""Functional tests for the two storage backends.

Both stores must honour the same contract: sibling lists load in index
order, ``save_siblings`` makes a computed list the persisted one, lookups
resolve members and their parents, and deleting a project cascades.
"""

from __future__ import annotations

import pytest

from rundown.logic.collection_store import utc_now
from rundown.logic.errors import ParentNotFound
from rundown.logic.kinds import ELEMENT, ITEM
from rundown.logic import reorder


def _project(store, project_id: str = "p1", name: str = "Evening News") -> str:
    now = utc_now()
    store.create_project(
        {
            "project_id": project_id,
            "name": name,
            "settings": {"language": "EN"},
            "created_at": now,
            "updated_at": now,
            "items": [],
        }
    )
    return project_id


def _item(item_id: str, project_id: str = "p1", elements: list[dict] | None = None) -> dict:
    return {
        "item_id": item_id,
        "project_id": project_id,
        "name": f"Item {item_id}",
        "expanded": True,
        "options": False,
        "elements": reorder.renumber(elements or []),
    }


def _element(element_id: str, item_id: str) -> dict:
    return {"element_id": element_id, "item_id": item_id, "type": "Super", "name": element_id, "line1": "Top"}


def test_project_lifecycle(store):
    _project(store)
    assert store.count_projects() == 1
    assert store.find_project_by_name("EVENING news") == {"project_id": "p1", "name": "Evening News"}
    assert store.find_project_by_name("Morning") is None
    assert store.rename_project("p1", "Late News") is True
    assert store.get_project("p1")["name"] == "Late News"
    assert store.rename_project("missing", "x") is False
    assert store.delete_project("p1") is True
    assert store.delete_project("p1") is False
    assert store.count_projects() == 0


def test_unknown_parent_raises(store):
    with pytest.raises(ParentNotFound):
        store.load_siblings(ITEM, "missing")
    with pytest.raises(ParentNotFound):
        store.load_siblings(ELEMENT, "missing")


def test_save_siblings_persists_order_and_indices(store):
    _project(store)
    first = reorder.renumber([_item("a"), _item("b"), _item("c")])
    store.save_siblings(ITEM, "p1", first)
    loaded = store.load_siblings(ITEM, "p1")
    assert [e["item_id"] for e in loaded] == ["a", "b", "c"]
    assert [e["index"] for e in loaded] == [0, 1, 2]

    moved = reorder.move_to(loaded, 0, 2)
    store.save_siblings(ITEM, "p1", moved)
    loaded = store.load_siblings(ITEM, "p1")
    assert [e["item_id"] for e in loaded] == ["b", "c", "a"]
    assert [e["index"] for e in loaded] == [0, 1, 2]

    shorter, _ = reorder.remove(loaded, 1)
    store.save_siblings(ITEM, "p1", shorter)
    assert [e["item_id"] for e in store.load_siblings(ITEM, "p1")] == ["b", "a"]
    assert store.list_projects() == [{"project_id": "p1", "name": "Evening News", "items": ["b", "a"]}]


def test_nested_elements_round_trip_with_opaque_fields(store):
    _project(store)
    store.save_siblings(ITEM, "p1", reorder.renumber([_item("a", elements=[_element("e1", "a"), _element("e2", "a")])]))
    elements = store.load_siblings(ELEMENT, "a")
    assert [e["element_id"] for e in elements] == ["e1", "e2"]
    assert [e["index"] for e in elements] == [0, 1]
    assert elements[0]["line1"] == "Top"
    project = store.get_project("p1")
    assert [e["element_id"] for e in project["items"][0]["elements"]] == ["e1", "e2"]


def test_member_lookups_and_rename(store):
    _project(store)
    store.save_siblings(ITEM, "p1", reorder.renumber([_item("a", elements=[_element("e1", "a")])]))
    assert store.find_parent(ITEM, "a") == "p1"
    assert store.find_parent(ELEMENT, "e1") == "a"
    assert store.find_parent(ITEM, "missing") is None
    assert store.get_member(ELEMENT, "e1")["type"] == "Super"
    assert store.get_member(ITEM, "missing") is None
    assert store.rename_member(ITEM, "a", "Headlines") is True
    assert store.rename_member(ELEMENT, "e1", "Lower third") is True
    assert store.get_member(ITEM, "a")["name"] == "Headlines"
    assert store.get_member(ELEMENT, "e1")["name"] == "Lower third"
    assert store.get_member(ITEM, "a")["index"] == 0
    assert store.rename_member(ELEMENT, "missing", "x") is False


def test_delete_project_cascades_to_members(store):
    _project(store)
    store.save_siblings(ITEM, "p1", reorder.renumber([_item("a", elements=[_element("e1", "a")])]))
    store.delete_project("p1")
    assert store.get_member(ITEM, "a") is None
    assert store.get_member(ELEMENT, "e1") is None


def test_projects_are_isolated(store):
    _project(store, "p1", "One")
    _project(store, "p2", "Two")
    store.save_siblings(ITEM, "p1", reorder.renumber([_item("a", "p1")]))
    store.save_siblings(ITEM, "p2", reorder.renumber([_item("b", "p2"), _item("c", "p2")]))
    assert [e["item_id"] for e in store.load_siblings(ITEM, "p1")] == ["a"]
    assert [e["item_id"] for e in store.load_siblings(ITEM, "p2")] == ["b", "c"]
