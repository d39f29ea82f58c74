import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_create_section_with_exercises(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(
        "/api/sections",
        json={
            "lesson_id": content_tree.lesson.id,
            "title": "Colours",
            "exercises": [
                {"type": "multiple_choice", "content": {"question": "Red?", "options": ["Rojo", "Azul"], "correct": "Rojo"}},
                {"type": "fill_blank", "content": {"text": "El cielo es ___", "blanks": [0], "correct": ["azul"]}},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    section = response.json()["data"]
    assert section["order"] == 2
    assert [(exercise["type"], exercise["order"]) for exercise in section["exercises"]] == [
        ("multiple_choice", 1),
        ("fill_blank", 2),
    ]
    assert section["exercises"][0]["content"]["correct"] == "Rojo"


async def test_nested_exercise_errors(client: AsyncClient, admin_headers, content_tree):
    response = await client.post(
        "/api/sections",
        json={
            "lesson_id": content_tree.lesson.id,
            "title": "Broken",
            "exercises": [{"type": "multiple_choice", "content": {"question": "?", "options": ["a", "b"], "correct": "c"}}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {
        "exercises.0.content.correct": ["The correct answer must be one of the options."]
    }


async def test_update_nested_exercises(client: AsyncClient, admin_headers, content_tree):
    response = await client.put(
        f"/api/sections/{content_tree.section.id}",
        json={
            "title": "Say hello!",
            "exercises": [
                {"id": content_tree.choice.id, "_remove": True},
                {"type": "matching", "content": {"items": ["rojo", "azul"], "matches": ["red", "blue"]}},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    section = response.json()["data"]
    assert section["title"] == "Say hello!"
    assert [(exercise["id"], exercise["order"]) for exercise in section["exercises"]][0] == (content_tree.blank.id, 1)
    assert section["exercises"][1]["type"] == "matching"
    assert section["exercises"][1]["order"] == 2


async def test_learners_do_not_see_answers(client: AsyncClient, learner_headers, content_tree):
    response = await client.get(f"/api/sections/{content_tree.section.id}/exercises", headers=learner_headers)

    exercises = response.json()["data"]
    assert [exercise["id"] for exercise in exercises] == [content_tree.choice.id, content_tree.blank.id]
    assert "correct" not in exercises[0]["content"]
    assert exercises[0]["content"]["options"] == ["Hola", "Adiós"]


async def test_delete_section_closes_gap(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/sections", json={"lesson_id": content_tree.lesson.id, "title": "Say goodbye"}, headers=admin_headers
    )
    second_id = created.json()["data"]["id"]

    response = await client.delete(f"/api/sections/{content_tree.section.id}", headers=admin_headers)

    assert response.status_code == 204
    assert (await client.get(f"/api/sections/{second_id}")).json()["data"]["order"] == 1
