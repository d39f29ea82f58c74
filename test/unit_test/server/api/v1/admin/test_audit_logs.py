import pytest
import pytest_asyncio
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def authored(client: AsyncClient, admin_headers):
    created = await client.post("/api/learning-paths", json={"title": "French"}, headers=admin_headers)
    path_id = created.json()["data"]["id"]
    await client.put(f"/api/learning-paths/{path_id}", json={"title": "French A1"}, headers=admin_headers)
    return path_id


async def test_list_newest_first(client: AsyncClient, admin_headers, authored):
    response = await client.get("/api/admin/audit-logs", headers=admin_headers)

    assert response.status_code == 200
    logs = response.json()["data"]
    assert [log["action"] for log in logs] == ["updated", "created"]
    updated = logs[0]
    assert updated["area"] == "learning_path"
    assert updated["user_name"] == "Ada Admin"
    assert updated["description"] == f"Ada Admin updated learning_path #{authored}"
    assert updated["changes"]["title"] == {"old": "French", "new": "French A1"}
    assert updated["ip_address"] == "127.0.0.1"


async def test_filters(client: AsyncClient, admin, admin_headers, authored):
    by_action = await client.get("/api/admin/audit-logs", params={"action": "created"}, headers=admin_headers)
    by_user = await client.get(f"/api/admin/audit-logs/user/{admin.id}", headers=admin_headers)
    by_content = await client.get(f"/api/admin/audit-logs/content/learning_path/{authored}", headers=admin_headers)
    future = await client.get("/api/admin/audit-logs", params={"from": "2999-01-01T00:00:00"}, headers=admin_headers)

    assert [log["action"] for log in by_action.json()["data"]] == ["created"]
    assert by_user.json()["pagination"]["total"] == 2
    assert by_content.json()["pagination"]["total"] == 2
    assert future.json()["data"] == []


async def test_show(client: AsyncClient, admin_headers, authored):
    log_id = (await client.get("/api/admin/audit-logs", headers=admin_headers)).json()["data"][-1]["id"]

    response = await client.get(f"/api/admin/audit-logs/{log_id}", headers=admin_headers)
    missing = await client.get("/api/admin/audit-logs/999", headers=admin_headers)

    assert response.json()["data"]["description"] == f"Ada Admin created learning_path #{authored}"
    assert missing.status_code == 404
    assert missing.json()["message"] == "Audit log 999 not found"
