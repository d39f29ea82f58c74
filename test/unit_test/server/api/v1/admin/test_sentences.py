import io
import subprocess
import wave
from array import array
from types import SimpleNamespace

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def wav_bytes(seconds=0.5, rate=8000):
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(b"\x01\x00" * int(rate * seconds))
    return buffer.getvalue()


@pytest.fixture
async def sentence(client: AsyncClient, admin_headers):
    words = []
    for text, translation in (("Buenos", "Good"), ("días", "morning")):
        response = await client.post(
            "/api/admin/words", json={"text": text, "language": "es", "translation": translation}, headers=admin_headers
        )
        assert response.status_code == 201
        words.append(response.json()["data"])
    response = await client.post(
        "/api/admin/sentences",
        json={
            "text": "Buenos días",
            "language": "es",
            "difficulty_level": "A1",
            "words": [{"word_id": words[0]["id"], "position": 1}, {"word_id": words[1]["id"], "position": 2}],
            "translations": [{"language": "en", "text": "Good morning"}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    return SimpleNamespace(data=response.json()["data"], words=words)


async def test_create_and_show(client: AsyncClient, admin_headers, sentence):
    response = await client.get(f"/api/admin/sentences/{sentence.data['id']}", headers=admin_headers)

    data = response.json()["data"]
    assert [word["text"] for word in data["words"]] == ["Buenos", "días"]
    assert data["translations"][0]["text"] == "Good morning"
    assert data["audio"] == []


async def test_list_filters_by_language(client: AsyncClient, admin_headers, sentence):
    spanish = await client.get("/api/admin/sentences", params={"language": "es"}, headers=admin_headers)
    french = await client.get("/api/admin/sentences", params={"language": "fr"}, headers=admin_headers)

    assert spanish.json()["pagination"]["total"] == 1
    assert french.json()["data"] == []


async def test_unknown_word_ids_are_rejected(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/admin/sentences",
        json={"text": "Hola", "language": "es", "words": [{"word_id": 999, "position": 1}]},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"words": ["Unknown word ids: [999]."]}


async def test_word_in_use_cannot_be_deleted(client: AsyncClient, admin_headers, sentence):
    response = await client.delete(f"/api/admin/words/{sentence.words[0]['id']}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete a word that is used in a sentence."


async def test_reorder_words(client: AsyncClient, admin_headers, sentence):
    first, second = (word["id"] for word in sentence.words)

    response = await client.post(
        f"/api/admin/sentences/{sentence.data['id']}/words/reorder", json={"words": [second, first]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"] == [{"word_id": second, "position": 1}, {"word_id": first, "position": 2}]

    partial = await client.post(
        f"/api/admin/sentences/{sentence.data['id']}/words/reorder", json={"words": [first]}, headers=admin_headers
    )
    assert partial.status_code == 400
    assert partial.json()["message"] == "Invalid word IDs provided."


async def test_update_word_timings(client: AsyncClient, admin_headers, sentence):
    first, second = (word["id"] for word in sentence.words)
    url = f"/api/admin/sentences/{sentence.data['id']}/word-timings"

    response = await client.put(
        url,
        json={
            "audio_duration": 1.5,
            "timings": [
                {"word_id": first, "start_time": 0.0, "end_time": 0.5, "metadata": {"emphasis": True}},
                {"word_id": second, "start_time": 0.8, "end_time": 1.4},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Word timings updated successfully"
    stats = body["data"]["stats"]
    assert stats["total_words"] == 2
    assert stats["emphasis_points"] == [{"word_id": first, "time": 0.0}]
    assert stats["timing_gaps"][0]["between_words"] == {"first": first, "second": second}
    assert body["data"]["timing_stats"]["words_with_emphasis"] == 1

    stored = (await client.get(url, headers=admin_headers)).json()["data"]
    assert [(item["start_time"], item["end_time"]) for item in stored] == [(0.0, 0.5), (0.8, 1.4)]
    assert stored[0]["metadata"] == {"emphasis": True}


async def test_invalid_word_timings(client: AsyncClient, admin_headers, sentence):
    first, _ = (word["id"] for word in sentence.words)

    response = await client.put(
        f"/api/admin/sentences/{sentence.data['id']}/word-timings",
        json={"audio_duration": 1.0, "timings": [{"word_id": first, "start_time": 0.5, "end_time": 0.2}]},
        headers=admin_headers,
    )

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["timings.0.end_time"] == ["End time must be greater than start time."]
    assert errors["timings"] == ["Timing information must be provided for all 2 words in the sentence."]


@pytest.fixture
async def repeated(client: AsyncClient, admin_headers):
    """The sentence "la casa la", which uses the word "la" twice."""
    ids = {}
    for text, translation in (("la", "the"), ("casa", "house")):
        response = await client.post(
            "/api/admin/words", json={"text": text, "language": "es", "translation": translation}, headers=admin_headers
        )
        ids[text] = response.json()["data"]["id"]
    response = await client.post(
        "/api/admin/sentences",
        json={
            "text": "la casa la",
            "language": "es",
            "words": [
                {"word_id": ids["la"], "position": 1},
                {"word_id": ids["casa"], "position": 2},
                {"word_id": ids["la"], "position": 3},
            ],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    return SimpleNamespace(id=response.json()["data"]["id"], **ids)


async def _stored_timings(client, admin_headers, sentence_id):
    response = await client.get(f"/api/admin/sentences/{sentence_id}/word-timings", headers=admin_headers)
    return [(item["text"], item["position"], item["start_time"], item["end_time"]) for item in response.json()["data"]]


async def test_repeated_word_keeps_a_timing_per_occurrence(client: AsyncClient, admin_headers, repeated):
    response = await client.put(
        f"/api/admin/sentences/{repeated.id}/word-timings",
        json={
            "audio_duration": 1.5,
            "timings": [
                {"word_id": repeated.la, "start_time": 0.0, "end_time": 0.3},
                {"word_id": repeated.casa, "start_time": 0.3, "end_time": 0.8},
                {"word_id": repeated.la, "start_time": 0.8, "end_time": 1.1},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert await _stored_timings(client, admin_headers, repeated.id) == [
        ("la", 1, 0.0, 0.3),
        ("casa", 2, 0.3, 0.8),
        ("la", 3, 0.8, 1.1),
    ]


async def test_repeated_word_cannot_take_extra_timings(client: AsyncClient, admin_headers, repeated):
    response = await client.put(
        f"/api/admin/sentences/{repeated.id}/word-timings",
        json={
            "audio_duration": 1.5,
            "timings": [
                {"word_id": repeated.casa, "start_time": 0.0, "end_time": 0.3},
                {"word_id": repeated.casa, "start_time": 0.3, "end_time": 0.8},
                {"word_id": repeated.la, "start_time": 0.8, "end_time": 1.1},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {
        "timings.1.word_id": ["The word has more timings than occurrences in the sentence."]
    }


async def test_reorder_moves_each_occurrence_of_a_repeated_word(client: AsyncClient, admin_headers, repeated):
    url = f"/api/admin/sentences/{repeated.id}"
    await client.put(
        f"{url}/word-timings",
        json={
            "audio_duration": 1.5,
            "timings": [
                {"word_id": repeated.la, "start_time": 0.0, "end_time": 0.3},
                {"word_id": repeated.casa, "start_time": 0.3, "end_time": 0.8},
                {"word_id": repeated.la, "start_time": 0.8, "end_time": 1.1},
            ],
        },
        headers=admin_headers,
    )

    response = await client.post(
        f"{url}/words/reorder", json={"words": [repeated.casa, repeated.la, repeated.la]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"] == [
        {"word_id": repeated.casa, "position": 1},
        {"word_id": repeated.la, "position": 2},
        {"word_id": repeated.la, "position": 3},
    ]
    assert await _stored_timings(client, admin_headers, repeated.id) == [
        ("casa", 1, 0.3, 0.8),
        ("la", 2, 0.0, 0.3),
        ("la", 3, 0.8, 1.1),
    ]


async def test_reorder_must_list_every_occurrence(client: AsyncClient, admin_headers, repeated):
    response = await client.post(
        f"/api/admin/sentences/{repeated.id}/words/reorder",
        json={"words": [repeated.casa, repeated.la]},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid word IDs provided."
    positions = [(text, position) for text, position, _, _ in await _stored_timings(client, admin_headers, repeated.id)]
    assert positions == [("la", 1), ("casa", 2), ("la", 3)]


async def test_word_longer_than_ten_seconds_is_rejected(client: AsyncClient, admin_headers, sentence):
    first, second = (word["id"] for word in sentence.words)

    response = await client.put(
        f"/api/admin/sentences/{sentence.data['id']}/word-timings",
        json={
            "audio_duration": 12.0,
            "timings": [
                {"word_id": first, "start_time": 0.0, "end_time": 10.5},
                {"word_id": second, "start_time": 10.6, "end_time": 11.0},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert response.json()["errors"] == {"timings.0": ["Word duration cannot exceed 10 seconds."]}
    stored = await _stored_timings(client, admin_headers, sentence.data["id"])
    assert [(start, end) for _, _, start, end in stored] == [(None, None), (None, None)]


async def test_upload_sentence_audio(client: AsyncClient, admin_headers, sentence, media_root):
    response = await client.post(
        f"/api/admin/sentences/{sentence.data['id']}/audio",
        files={"file": ("buenos.wav", wav_bytes(0.5), "audio/wav")},
        data={"is_slow": "true"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["collection"] == "slow_pronunciation"
    assert data["duration"] == pytest.approx(0.5)
    assert data["url"].startswith("/media/slow_pronunciation/")
    assert data["url"].endswith(f"{sentence.data['id']}_slow.mp3")
    assert any(media_root.rglob("*_slow.mp3"))

    detail = (await client.get(f"/api/admin/sentences/{sentence.data['id']}", headers=admin_headers)).json()["data"]
    assert [item["collection"] for item in detail["audio"]] == ["slow_pronunciation"]


async def test_upload_rejects_non_audio(client: AsyncClient, admin_headers, sentence):
    response = await client.post(
        f"/api/admin/sentences/{sentence.data['id']}/audio",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["message"] == "Could not determine audio file duration"


async def test_waveform(client: AsyncClient, admin_headers, sentence, monkeypatch):
    pcm = array("h", [8192, -8192, 16384, -16384])
    monkeypatch.setattr(
        subprocess, "run", lambda command, **kwargs: SimpleNamespace(returncode=0, stdout=pcm.tobytes(), stderr=b"")
    )

    response = await client.post(
        f"/api/admin/sentences/{sentence.data['id']}/waveform",
        files={"file": ("buenos.wav", wav_bytes(0.1), "audio/wav")},
        data={"samples": "2"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["waveform"] == [0.25, 0.5]


async def test_delete_sentence(client: AsyncClient, admin_headers, sentence):
    response = await client.delete(f"/api/admin/sentences/{sentence.data['id']}", headers=admin_headers)
    assert response.status_code == 204

    missing = await client.get(f"/api/admin/sentences/{sentence.data['id']}", headers=admin_headers)
    assert missing.status_code == 404

    word_delete = await client.delete(f"/api/admin/words/{sentence.words[0]['id']}", headers=admin_headers)
    assert word_delete.status_code == 204
