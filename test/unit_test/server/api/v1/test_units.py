import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _unit_titles(client, path_id):
    response = await client.get(f"/api/learning-paths/{path_id}/units")
    return [(unit["title"], unit["order"]) for unit in response.json()["data"]]


async def _create_unit(client, headers, path_id, title, order=None):
    body = {"learning_path_id": path_id, "title": title}
    if order is not None:
        body["order"] = order
    response = await client.post("/api/units", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


async def test_create_appends_by_default(client: AsyncClient, admin_headers, content_tree):
    unit = await _create_unit(client, admin_headers, content_tree.path.id, "Numbers")

    assert unit["order"] == 2


async def test_create_with_order_shifts_siblings(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id
    await _create_unit(client, admin_headers, path_id, "Numbers")
    await _create_unit(client, admin_headers, path_id, "Alphabet", order=1)

    assert await _unit_titles(client, path_id) == [("Alphabet", 1), ("Greetings", 2), ("Numbers", 3)]


async def test_create_for_missing_path(client: AsyncClient, admin_headers):
    response = await client.post("/api/units", json={"learning_path_id": 404, "title": "X"}, headers=admin_headers)
    assert response.status_code == 404


async def test_reorder_units(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id
    numbers = await _create_unit(client, admin_headers, path_id, "Numbers")

    response = await client.post(
        f"/api/learning-paths/{path_id}/units/reorder",
        json={"units": [numbers["id"], content_tree.unit.id]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert [unit["title"] for unit in response.json()["data"]] == ["Numbers", "Greetings"]
    assert await _unit_titles(client, path_id) == [("Numbers", 1), ("Greetings", 2)]


async def test_reorder_rejects_foreign_ids(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(
        f"/api/learning-paths/{content_tree.path.id}/units/reorder",
        json={"units": [content_tree.unit.id, 9999]},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid unit IDs provided."


async def test_show_has_neighbours(client: AsyncClient, admin_headers, content_tree):
    numbers = await _create_unit(client, admin_headers, content_tree.path.id, "Numbers")

    first = (await client.get(f"/api/units/{content_tree.unit.id}")).json()["data"]
    second = (await client.get(f"/api/units/{numbers['id']}")).json()["data"]

    assert first["previous_unit_id"] is None
    assert first["next_unit_id"] == numbers["id"]
    assert second["previous_unit_id"] == content_tree.unit.id
    assert [lesson["title"] for lesson in first["lessons"]] == ["Hello"]


async def test_clone_copies_the_tree_to_the_end(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(f"/api/units/{content_tree.unit.id}/clone", headers=admin_headers)

    assert response.status_code == 201
    copy = response.json()["data"]
    assert copy["title"] == "Greetings (Copy)"
    assert copy["order"] == 2

    lessons = (await client.get(f"/api/units/{copy['id']}/lessons", params={"with_sections": True})).json()["data"]
    assert [lesson["title"] for lesson in lessons] == ["Hello"]
    assert lessons[0]["id"] != content_tree.lesson.id


async def test_delete_closes_the_gap(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id
    await _create_unit(client, admin_headers, path_id, "Numbers")
    await _create_unit(client, admin_headers, path_id, "Colours")

    response = await client.delete(f"/api/units/{content_tree.unit.id}", headers=admin_headers)

    assert response.status_code == 204
    assert await _unit_titles(client, path_id) == [("Numbers", 1), ("Colours", 2)]


async def test_update_moves_unit(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id
    await _create_unit(client, admin_headers, path_id, "Numbers")

    response = await client.put(
        f"/api/units/{content_tree.unit.id}", json={"title": "Hi there", "order": 2}, headers=admin_headers
    )

    assert response.status_code == 200
    assert await _unit_titles(client, path_id) == [("Numbers", 1), ("Hi there", 2)]
