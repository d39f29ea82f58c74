import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_show_lesson_with_neighbours(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/lessons", json={"unit_id": content_tree.unit.id, "title": "Goodbye"}, headers=admin_headers
    )
    second_id = created.json()["data"]["id"]

    first = (await client.get(f"/api/lessons/{content_tree.lesson.id}")).json()["data"]
    second = (await client.get(f"/api/lessons/{second_id}")).json()["data"]

    assert [section["title"] for section in first["sections"]] == ["Say hello"]
    assert first["previous_lesson_id"] is None
    assert first["next_lesson_id"] == second_id
    assert second["order"] == 2
    assert second["previous_lesson_id"] == content_tree.lesson.id


async def test_create_with_vocabulary(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(
        "/api/lessons",
        json={
            "unit_id": content_tree.unit.id,
            "title": "Numbers",
            "order": 1,
            "vocabulary_items": [{"word": "uno", "translation": "one"}, {"word": "dos", "translation": "two"}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["message"] == "Lesson created successfully"
    lesson = response.json()["data"]
    assert [item["word"] for item in lesson["vocabulary_items"]] == ["uno", "dos"]
    shifted = (await client.get(f"/api/lessons/{content_tree.lesson.id}")).json()["data"]
    assert shifted["order"] == 2


async def test_update_vocabulary_protocol(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/lessons",
        json={
            "unit_id": content_tree.unit.id,
            "title": "Numbers",
            "vocabulary_items": [{"word": "uno", "translation": "one"}, {"word": "dos", "translation": "two"}],
        },
        headers=admin_headers,
    )
    lesson = created.json()["data"]
    uno, dos = lesson["vocabulary_items"]

    response = await client.put(
        f"/api/lessons/{lesson['id']}",
        json={
            "vocabulary_items": [
                {"id": uno["id"], "_remove": True},
                {"id": dos["id"], "example": "dos cafés"},
                {"word": "tres", "translation": "three"},
            ]
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    items = response.json()["data"]["vocabulary_items"]
    assert [(item["word"], item["example"]) for item in items] == [("dos", "dos cafés"), ("tres", None)]


async def test_update_rejects_foreign_vocabulary_item(client: AsyncClient, admin_headers, content_tree):
    response = await client.put(
        f"/api/lessons/{content_tree.lesson.id}",
        json={"vocabulary_items": [{"id": 999, "word": "x"}]},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"vocabulary_items.0.id": ["The selected vocabulary item is invalid."]}


async def test_lesson_vocabulary_listing(client: AsyncClient, admin_headers, content_tree):
    await client.post(
        "/api/vocabulary",
        json={"lesson_id": content_tree.lesson.id, "word": "hola", "translation": "hello"},
        headers=admin_headers,
    )

    response = await client.get(f"/api/lessons/{content_tree.lesson.id}/vocabulary")

    assert [item["word"] for item in response.json()["data"]] == ["hola"]
    assert (await client.get("/api/lessons/999/vocabulary")).status_code == 404


async def test_clone_lesson(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(f"/api/lessons/{content_tree.lesson.id}/clone", headers=admin_headers)

    assert response.status_code == 201
    copy = response.json()["data"]
    assert copy["title"] == "Hello (Copy)"
    assert copy["order"] == 2
    sections = (await client.get(f"/api/lessons/{copy['id']}/sections", params={"with_exercises": True})).json()["data"]
    assert [len(section["exercises"]) for section in sections] == [2]


async def test_delete_lesson(client: AsyncClient, admin_headers, content_tree):
    response = await client.delete(f"/api/lessons/{content_tree.lesson.id}", headers=admin_headers)

    assert response.status_code == 204
    assert (await client.get(f"/api/lessons/{content_tree.lesson.id}")).status_code == 404
    assert (await client.get(f"/api/sections/{content_tree.section.id}")).status_code == 404


async def test_reorder_sections(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/sections", json={"lesson_id": content_tree.lesson.id, "title": "Say goodbye"}, headers=admin_headers
    )
    second_id = created.json()["data"]["id"]

    response = await client.post(
        f"/api/lessons/{content_tree.lesson.id}/sections/reorder",
        json={"sections": [second_id, content_tree.section.id]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert [(section["id"], section["order"]) for section in response.json()["data"]] == [
        (second_id, 1),
        (content_tree.section.id, 2),
    ]


async def test_lesson_progress(client: AsyncClient, learner_headers, content_tree):
    before = await client.get(f"/api/lessons/{content_tree.lesson.id}/progress", headers=learner_headers)
    await client.post(f"/api/exercises/{content_tree.choice.id}/attempt", json={"answer": "Hola"}, headers=learner_headers)
    after = await client.get(f"/api/lessons/{content_tree.lesson.id}/progress", headers=learner_headers)

    assert before.json()["data"]["status"] == "not_started"
    assert after.json()["data"]["status"] == "in_progress"
    assert after.json()["data"]["sections"][0] == {
        "section_id": content_tree.section.id,
        "title": "Say hello",
        "status": "in_progress",
        "completed": False,
    }
