import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_vocabulary_item_lifecycle(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/vocabulary",
        json={"lesson_id": content_tree.lesson.id, "word": "hola", "translation": "hello"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    item_id = created.json()["data"]["id"]

    updated = await client.put(f"/api/vocabulary/{item_id}", json={"example": "¡Hola, Ana!"}, headers=admin_headers)
    assert updated.json()["data"] == {
        "id": item_id,
        "lesson_id": content_tree.lesson.id,
        "word": "hola",
        "translation": "hello",
        "example": "¡Hola, Ana!",
    }

    deleted = await client.delete(f"/api/vocabulary/{item_id}", headers=admin_headers)
    assert deleted.status_code == 204
    assert (await client.get(f"/api/vocabulary/{item_id}")).status_code == 404


async def test_vocabulary_needs_existing_lesson(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/vocabulary", json={"lesson_id": 999, "word": "hola", "translation": "hello"}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Lesson 999 not found"


async def test_published_vocabulary_cannot_be_deleted(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/vocabulary",
        json={"lesson_id": content_tree.lesson.id, "word": "hola", "translation": "hello"},
        headers=admin_headers,
    )
    await client.post("/api/admin/content/bulk-publish", json={"ids": [content_tree.path.id]}, headers=admin_headers)

    response = await client.delete(f"/api/vocabulary/{created.json()['data']['id']}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete a vocabulary item from a published learning path."


async def test_guide_book_entry_lifecycle(client: AsyncClient, admin_headers, content_tree):
    created = await client.post(
        "/api/guide-book-entries",
        json={"unit_id": content_tree.unit.id, "topic": "Greetings", "content": "Use hola any time of day."},
        headers=admin_headers,
    )
    assert created.status_code == 201
    entry_id = created.json()["data"]["id"]

    updated = await client.put(f"/api/guide-book-entries/{entry_id}", json={"topic": "Saying hello"}, headers=admin_headers)
    assert updated.json()["data"]["topic"] == "Saying hello"
    assert (await client.get(f"/api/guide-book-entries/{entry_id}")).json()["data"]["content"] == "Use hola any time of day."

    assert (await client.delete(f"/api/guide-book-entries/{entry_id}", headers=admin_headers)).status_code == 204
    assert (await client.get(f"/api/guide-book-entries/{entry_id}")).status_code == 404


async def test_vocabulary_writes_require_admin(client: AsyncClient, learner_headers, content_tree):
    response = await client.post(
        "/api/vocabulary",
        json={"lesson_id": content_tree.lesson.id, "word": "hola", "translation": "hello"},
        headers=learner_headers,
    )
    assert response.status_code == 403
