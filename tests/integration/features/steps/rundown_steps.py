"""Step definitions for rundown ordering and lifecycle scenarios."""

from __future__ import annotations

from typing import Any, Dict, List

from behave import given, then, when

PREFIX = "/api/v1"


def _names(csv: str) -> List[str]:
    return [n.strip() for n in csv.split(",") if n.strip()]


def _items(context) -> List[Dict[str, Any]]:
    project_id = context.vars["project_id"]
    resp = context.client.get(f"{PREFIX}/projects/{project_id}")
    assert resp.status_code == 200, resp.text
    return resp.json()["items"]


def _create_project(context, name: str, overwrite: bool = False):
    context.last_response = context.client.post(
        f"{PREFIX}/projects", json={"name": name, "overwrite": overwrite}
    )
    return context.last_response


# ------------------
# Given
# ------------------


@given('a project "{name}" with items "{items}"')
def step_project_with_items(context, name: str, items: str) -> None:
    resp = _create_project(context, name)
    assert resp.status_code == 201, resp.text
    project_id = resp.json()["project_id"]
    context.vars["project_id"] = project_id
    for pos, item_name in enumerate(_names(items)):
        created = context.client.post(
            f"{PREFIX}/projects/{project_id}/items", json={"index": pos, "name": item_name}
        )
        assert created.status_code == 201, created.text


@given("{count:d} projects exist")
def step_many_projects(context, count: int) -> None:
    for n in range(count):
        resp = _create_project(context, f"Project {n}")
        assert resp.status_code == 201, resp.text


@given("change notifications are cleared")
def step_clear_notifications(context) -> None:
    context.client.get("/__test__/events")


# ------------------
# When
# ------------------


@when('I create a project named "{name}"')
def step_create_project(context, name: str) -> None:
    _create_project(context, name)


@when('I create a project named "{name}" with overwrite')
def step_create_project_overwrite(context, name: str) -> None:
    _create_project(context, name, overwrite=True)


@when("I move item at index {index:d} up")
def step_move_up(context, index: int) -> None:
    context.last_response = context.client.put(
        f"{PREFIX}/projects/{context.vars['project_id']}/items/up", json={"index": index}
    )


@when("I move item at index {index:d} down")
def step_move_down(context, index: int) -> None:
    context.last_response = context.client.put(
        f"{PREFIX}/projects/{context.vars['project_id']}/items/down", json={"index": index}
    )


@when("I move item from index {source:d} to index {destination:d}")
def step_move_to(context, source: int, destination: int) -> None:
    context.last_response = context.client.put(
        f"{PREFIX}/projects/{context.vars['project_id']}/items/move",
        json={"from_index": source, "to_index": destination},
    )


@when("I cut the item at index {index:d}")
def step_cut(context, index: int) -> None:
    resp = context.client.put(
        f"{PREFIX}/projects/{context.vars['project_id']}/items/cut", json={"index": index}
    )
    assert resp.status_code == 200, resp.text
    context.vars["clipboard"] = resp.json()["removed"]
    context.last_response = resp


@when("I paste the cut item at index {index:d}")
def step_paste(context, index: int) -> None:
    context.last_response = context.client.put(
        f"{PREFIX}/projects/{context.vars['project_id']}/items/paste",
        json={"index": index, "entry": context.vars["clipboard"]},
    )


@when('I delete item "{name}"')
def step_delete_item(context, name: str) -> None:
    match = next(i for i in _items(context) if i["name"] == name)
    context.last_response = context.client.delete(f"{PREFIX}/items/{match['item_id']}")


# ------------------
# Then
# ------------------


@then("the response status is {status:d}")
def step_status(context, status: int) -> None:
    resp = context.last_response
    assert resp is not None, "no request was made"
    assert resp.status_code == status, f"{resp.status_code}: {resp.text}"


@then('the problem code is "{code}"')
def step_problem_code(context, code: str) -> None:
    resp = context.last_response
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == code, resp.text


@then('the item order is "{items}"')
def step_item_order(context, items: str) -> None:
    assert [i["name"] for i in _items(context)] == _names(items)


@then("the item indices are contiguous")
def step_indices_contiguous(context) -> None:
    items = _items(context)
    assert [i["index"] for i in items] == list(range(len(items)))


@then('{count:d} "{kind}" notification was sent for the project')
def step_notifications(context, count: int, kind: str) -> None:
    events = context.client.get("/__test__/events").json()["events"]
    matching = [e for e in events if e["kind"] == kind and e["parent_id"] == context.vars["project_id"]]
    assert len(matching) == count, events
