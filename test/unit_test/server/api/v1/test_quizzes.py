import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _quiz(client, headers, unit_id, title, **extra):
    body = {"unit_id": unit_id, "title": title, "passing_score": 50, "is_published": True}
    body.update(extra)
    response = await client.post("/api/quizzes", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


async def _question(client, headers, quiz_id, **body):
    response = await client.post(f"/api/quizzes/{quiz_id}/questions", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
async def quiz(client: AsyncClient, admin_headers, content_tree):
    quiz = await _quiz(client, admin_headers, content_tree.unit.id, "Greetings check")
    first = await _question(
        client,
        admin_headers,
        quiz["id"],
        question="How do you say hello?",
        type="single_choice",
        options=["Hola", "Adiós"],
        correct_answer={"value": "Hola"},
        explanation="Hola means hello.",
    )
    second = await _question(
        client,
        admin_headers,
        quiz["id"],
        question="'Adiós' means goodbye.",
        type="true_false",
        correct_answer={"value": True},
    )
    return {"quiz": quiz, "questions": [first, second]}


async def test_quiz_orders_within_parent(client: AsyncClient, admin_headers, content_tree, quiz):
    second = await _quiz(client, admin_headers, content_tree.unit.id, "Second check")

    assert quiz["quiz"]["order"] == 1
    assert second["order"] == 2
    listing = await client.get("/api/quizzes", params={"unit_id": content_tree.unit.id})
    assert [item["title"] for item in listing.json()["data"]] == ["Greetings check", "Second check"]


async def test_quiz_needs_a_parent(client: AsyncClient, admin_headers):
    response = await client.post("/api/quizzes", json={"title": "Orphan"}, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["errors"] == {"body": ["A quiz must belong to a unit or a lesson."]}


async def test_question_answer_shape_is_checked(client: AsyncClient, admin_headers, quiz):
    response = await client.post(
        f"/api/quizzes/{quiz['quiz']['id']}/questions",
        json={"question": "Pick", "type": "multiple_choice", "options": ["a", "b"], "correct_answer": {"value": "a"}},
        headers=admin_headers,
    )
    assert response.status_code == 422


async def test_public_view_hides_answers(client: AsyncClient, learner_headers, quiz):
    anonymous = (await client.get(f"/api/quizzes/{quiz['quiz']['id']}")).json()["data"]
    assert "correct_answer" not in anonymous["questions"][0]
    assert "attempt_count" not in anonymous

    signed_in = (await client.get(f"/api/quizzes/{quiz['quiz']['id']}", headers=learner_headers)).json()["data"]
    assert signed_in["attempt_count"] == 0
    assert signed_in["best_score"] is None


async def test_submit_grades_and_suggests_next_quiz(client: AsyncClient, admin_headers, learner_headers, content_tree, quiz):
    next_quiz = await _quiz(client, admin_headers, content_tree.unit.id, "Next check")
    await _quiz(client, admin_headers, content_tree.unit.id, "Hidden draft", is_published=False)
    first, second = quiz["questions"]

    response = await client.post(
        f"/api/quizzes/{quiz['quiz']['id']}/submit",
        json={"answers": {str(first["id"]): "Hola", str(second["id"]): "false"}},
        headers=learner_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["score"] == 50.0
    assert data["passed"] is True
    assert data["required_score"] == 50
    assert data["next_quiz"] == {"id": next_quiz["id"], "title": "Next check"}
    assert data["feedback"][0] == {"question_id": first["id"], "correct": True, "explanation": "Hola means hello."}
    assert data["feedback"][1]["correct_answer"] == {"value": True}


async def test_failed_submit_has_no_next_quiz(client: AsyncClient, learner_headers, quiz):
    response = await client.post(f"/api/quizzes/{quiz['quiz']['id']}/submit", json={"answers": {}}, headers=learner_headers)

    data = response.json()["data"]
    assert data["score"] == 0.0
    assert data["passed"] is False
    assert data["next_quiz"] is None

    progress = await client.get(f"/api/progress/quiz/{quiz['quiz']['id']}", headers=learner_headers)
    assert progress.json()["data"]["status"] == "failed"


async def test_history_and_statistics(client: AsyncClient, admin_headers, learner_headers, quiz):
    quiz_id = quiz["quiz"]["id"]
    first, second = quiz["questions"]
    await client.post(f"/api/quizzes/{quiz_id}/submit", json={"answers": {}}, headers=learner_headers)
    await client.post(
        f"/api/quizzes/{quiz_id}/submit",
        json={"answers": {str(first["id"]): "Hola", str(second["id"]): True}},
        headers=learner_headers,
    )

    history = (await client.get(f"/api/quizzes/{quiz_id}/history", headers=learner_headers)).json()["data"]
    assert [attempt["score"] for attempt in history["attempts"]] == [100.0, 0.0]
    assert history["stats"] == {"average_score": 50.0, "best_score": 100.0, "total_attempts": 2, "pass_rate": 50.0}

    progress = (await client.get(f"/api/progress/quiz/{quiz_id}", headers=learner_headers)).json()["data"]
    assert progress["status"] == "completed"
    assert progress["meta_data"]["best_score"] == 100.0
    assert progress["meta_data"]["attempts"] == 2

    forbidden = await client.get(f"/api/quizzes/{quiz_id}/statistics", headers=learner_headers)
    assert forbidden.status_code == 403

    stats = (await client.get(f"/api/quizzes/{quiz_id}/statistics", headers=admin_headers)).json()["data"]
    assert stats["total_attempts"] == 2
    assert stats["pass_rate"] == 50.0
    assert stats["question_stats"][0]["correct_rate"] == 50.0


async def test_update_and_delete_question(client: AsyncClient, admin_headers, quiz):
    first = quiz["questions"][0]

    updated = await client.put(f"/api/quiz-questions/{first['id']}", json={"points": 3}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["points"] == 3

    deleted = await client.delete(f"/api/quiz-questions/{first['id']}", headers=admin_headers)
    assert deleted.status_code == 204

    remaining = await client.get(f"/api/quizzes/{quiz['quiz']['id']}/questions", headers=admin_headers)
    assert [question["id"] for question in remaining.json()["data"]] == [quiz["questions"][1]["id"]]
