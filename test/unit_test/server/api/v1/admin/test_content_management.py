import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_list_by_status(client: AsyncClient, admin_headers, content_tree):
    drafts = await client.get("/api/admin/content/draft", headers=admin_headers)
    published = await client.get("/api/admin/content/published", headers=admin_headers)

    assert drafts.status_code == 200
    assert [path["title"] for path in drafts.json()["data"]] == ["Spanish Basics"]
    assert drafts.json()["pagination"]["total"] == 1
    assert published.json()["data"] == []


async def test_unknown_status(client: AsyncClient, admin_headers):
    response = await client.get("/api/admin/content/retired", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Unknown content status 'retired'"


async def test_bulk_publish_and_archive(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id

    published = await client.post("/api/admin/content/bulk-publish", json={"ids": [path_id, 999]}, headers=admin_headers)

    assert published.status_code == 200
    assert published.json()["data"] == [
        {"id": path_id, "success": True, "message": "Learning path published."},
        {"id": 999, "success": False, "message": "Learning path not found."},
    ]
    shown = (await client.get("/api/admin/content/published", headers=admin_headers)).json()["data"]
    assert shown[0]["status"] == "published"
    assert shown[0]["published_at"] is not None

    archived = await client.post("/api/admin/content/bulk-archive", json={"ids": [path_id]}, headers=admin_headers)
    assert archived.json()["data"] == [{"id": path_id, "success": True, "message": "Learning path archived."}]


async def test_bulk_delete_refuses_published_paths(client: AsyncClient, admin_headers, content_tree):
    path_id = content_tree.path.id
    await client.post("/api/admin/content/bulk-publish", json={"ids": [path_id]}, headers=admin_headers)

    refused = await client.post("/api/admin/content/bulk-delete", json={"ids": [path_id]}, headers=admin_headers)
    assert refused.json()["data"] == [
        {"id": path_id, "success": False, "message": "Cannot delete a published learning path."}
    ]

    await client.post("/api/admin/content/bulk-archive", json={"ids": [path_id]}, headers=admin_headers)
    deleted = await client.post("/api/admin/content/bulk-delete", json={"ids": [path_id]}, headers=admin_headers)

    assert deleted.json()["data"] == [{"id": path_id, "success": True, "message": "Learning path deleted."}]
    assert (await client.get(f"/api/learning-paths/{path_id}")).status_code == 404


async def test_bulk_ids_required(client: AsyncClient, admin_headers):
    response = await client.post("/api/admin/content/bulk-publish", json={"ids": []}, headers=admin_headers)
    assert response.status_code == 422


async def test_export_document(client: AsyncClient, admin_headers, content_tree):
    response = await client.get(f"/api/admin/content/export/{content_tree.path.id}", headers=admin_headers)

    assert response.status_code == 200
    document = response.json()["data"]
    assert document["title"] == "Spanish Basics"
    assert document["status"] == "draft"
    unit = document["units"][0]
    assert unit["title"] == "Greetings"
    assert unit["quizzes"] == []
    section = unit["lessons"][0]["sections"][0]
    assert section["title"] == "Say hello"
    assert [exercise["type"] for exercise in section["exercises"]] == ["multiple_choice", "fill_blank"]
    assert section["exercises"][0]["content"]["correct"] == "Hola"

    logs = (await client.get("/api/admin/audit-logs", params={"action": "exported"}, headers=admin_headers)).json()["data"]
    assert [log["auditable_id"] for log in logs] == [content_tree.path.id]


async def test_preview_missing_path(client: AsyncClient, admin_headers):
    response = await client.get("/api/admin/content/preview/999", headers=admin_headers)
    assert response.status_code == 404


async def test_import_creates_draft_copy(client: AsyncClient, admin_headers, content_tree):
    await client.post("/api/admin/content/bulk-publish", json={"ids": [content_tree.path.id]}, headers=admin_headers)
    document = (await client.get(f"/api/admin/content/preview/{content_tree.path.id}", headers=admin_headers)).json()["data"]

    response = await client.post("/api/admin/content/import", json={"document": document}, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Content imported successfully"
    assert body["data"]["status"] == "draft"
    assert body["data"]["id"] != content_tree.path.id

    imported = (await client.get(f"/api/admin/content/preview/{body['data']['id']}", headers=admin_headers)).json()["data"]
    exercises = imported["units"][0]["lessons"][0]["sections"][0]["exercises"]
    assert [(exercise["type"], exercise["order"]) for exercise in exercises] == [("multiple_choice", 1), ("fill_blank", 2)]


async def test_import_rejects_malformed_document(client: AsyncClient, admin_headers):
    document = {
        "title": "Broken",
        "units": [
            {"title": "One", "lessons": [{"title": ""}]},
            {
                "title": "Two",
                "lessons": [
                    {
                        "title": "Lesson",
                        "sections": [
                            {
                                "title": "Section",
                                "exercises": [
                                    {"type": "multiple_choice", "content": {"question": "?", "options": ["a"], "correct": "b"}}
                                ],
                            }
                        ],
                    }
                ],
            },
        ],
    }

    response = await client.post("/api/admin/content/import", json={"document": document}, headers=admin_headers)

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["document.units.0.lessons.0.title"] == ["The title field is required."]
    assert any(key.startswith("document.units.1.lessons.0.sections.0.exercises.0.") for key in errors)
    assert (await client.get("/api/admin/content/draft", headers=admin_headers)).json()["data"] == []


async def test_content_management_requires_admin(client: AsyncClient, learner_headers):
    response = await client.get("/api/admin/content/draft", headers=learner_headers)
    assert response.status_code == 403
