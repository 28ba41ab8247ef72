import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import AUDIO_URL, make_settings, record
from vocalremix.main import create_app


@pytest.fixture
def mock_client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def live_app(live_settings, suno):
    return create_app(live_settings, transport=suno.transport)


@pytest.fixture
def live_client(live_app):
    with TestClient(live_app) as client:
        yield client


def test_health(mock_client):
    assert mock_client.get("/api/health").json() == {"status": "ok", "mode": "mock"}


def test_styles(mock_client):
    styles = mock_client.get("/api/styles").json()["styles"]
    assert [s["id"] for s in styles][:3] == ["pop", "rock", "jazz"]
    assert {"id", "name", "description", "icon", "prompt", "tags"} <= styles[0].keys()


# --- upload ---


def test_upload_stores_and_serves_file(mock_client):
    resp = mock_client.post(
        "/api/upload",
        files={"audio": ("take one.webm", b"RIFFdata", "audio/webm;codecs=opus")},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["fileName"].startswith("audio_")
    assert data["fileName"].endswith("take_one.webm")
    assert data["fileUrl"] == f"/uploads/{data['fileName']}"

    served = mock_client.get(data["fileUrl"])
    assert served.status_code == 200
    assert served.content == b"RIFFdata"


def test_upload_missing_file(mock_client):
    resp = mock_client.post("/api/upload", data={"other": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "No audio file provided"}


def test_upload_too_large(tmp_path):
    settings = make_settings(tmp_path, max_upload_bytes=4)
    with TestClient(create_app(settings)) as client:
        resp = client.post("/api/upload", files={"audio": ("a.mp3", b"12345", "audio/mpeg")})
    assert resp.status_code == 400
    assert "too large" in resp.json()["error"]


def test_upload_unsupported_type(mock_client):
    resp = mock_client.post("/api/upload", files={"audio": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    assert "Unsupported" in resp.json()["error"]


# --- process ---


def test_process_requires_file_url(mock_client):
    resp = mock_client.post("/api/process", json={})
    assert resp.status_code == 400


def test_process_mock_analysis(mock_client):
    resp = mock_client.post("/api/process", json={"fileUrl": "/uploads/a.webm"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["transcription"]
    assert data["key"] == "C major"
    assert data["bpm"] == 120
    assert data["mood"] == "happy"


# --- generate (mock) ---


def test_generate_mock_is_terminal(mock_client):
    resp = mock_client.post(
        "/api/generate",
        json={"fileUrl": "/uploads/a.webm", "style": "pop", "metadata": {"mood": "happy"}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "complete"
    assert data["audioUrl"] == "/uploads/a.webm"
    assert "taskId" not in data
    assert "pop" in data["metadata"]["tags"]

    song = mock_client.get(f"/api/result/{data['songId']}").json()
    assert song["output_url"] == "/uploads/a.webm"
    assert song["metadata"]["mood"] == "happy"
    assert song["style"] == "pop"


@pytest.mark.parametrize(
    "body,error",
    [
        ({"style": "pop"}, "Missing required parameters"),
        ({"fileUrl": "/uploads/a.webm"}, "Missing required parameters"),
        ({"fileUrl": "/uploads/a.webm", "style": "polka"}, "Invalid style"),
    ],
)
def test_generate_rejects_bad_requests(mock_client, body, error):
    resp = mock_client.post("/api/generate", json=body)
    assert resp.status_code == 400
    assert resp.json()["error"] == error
    assert mock_client.get("/api/songs").json()["count"] == 0


def test_songs_listing_and_missing_result(mock_client):
    for style in ("pop", "rock"):
        mock_client.post("/api/generate", json={"fileUrl": "/uploads/a.webm", "style": style})

    data = mock_client.get("/api/songs").json()
    assert data["count"] == 2
    assert [s["style"] for s in data["songs"]] == ["rock", "pop"]

    resp = mock_client.get("/api/result/nope")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_status_without_key_is_server_error(mock_client):
    resp = mock_client.get("/api/status/task-1")
    assert resp.status_code == 500
    assert "SUNO_API_KEY" in resp.json()["error"]


# --- generate + status (live) ---


def test_generate_live_returns_task(live_client, suno):
    resp = live_client.post("/api/generate", json={"fileUrl": "/uploads/a.webm", "style": "jazz"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["taskId"] == "task-1"
    assert data["status"] == "queued"
    assert "audioUrl" not in data

    body = suno.json_body("/generate/add-instrumental")
    assert body["uploadUrl"] == "https://remix.example.com/uploads/a.webm"
    assert body["tags"].startswith("Remix the vocals into a smooth jazz")

    song = live_client.get(f"/api/result/{data['songId']}").json()
    assert song["output_url"] is None
    assert song["task_id"] == "task-1"


def test_generate_live_custom_prompt(live_client, suno):
    live_client.post(
        "/api/generate",
        json={"fileUrl": AUDIO_URL, "style": "jazz", "prompt": "bossa nova, nylon guitar"},
    )
    assert suno.json_body("/generate/add-instrumental")["tags"] == "bossa nova, nylon guitar"


def test_generate_live_unreachable_input(live_client, suno):
    suno.probe_status = 404
    resp = live_client.post("/api/generate", json={"fileUrl": AUDIO_URL, "style": "pop"})
    assert resp.status_code == 400
    assert "not accessible" in resp.json()["error"]


def test_generate_live_failure_falls_back_to_mock(live_client, suno):
    suno.submit_response = httpx.Response(503)
    data = live_client.post("/api/generate", json={"fileUrl": AUDIO_URL, "style": "pop"}).json()
    assert data["status"] == "complete"
    assert data["audioUrl"] == AUDIO_URL


def test_status_progress_then_completion_updates_song(live_client, suno):
    song_id = live_client.post(
        "/api/generate", json={"fileUrl": AUDIO_URL, "style": "pop"}
    ).json()["songId"]

    suno.statuses = [record("FIRST_SUCCESS", id="audio-1", streamAudioUrl="https://cdn/stream")]
    data = live_client.get("/api/status/task-1").json()
    assert data["status"] == "processing"
    assert data["audioUrl"] == "https://cdn/stream"
    assert "lyrics" not in data
    assert live_client.get(f"/api/result/{song_id}").json()["output_url"] is None

    suno.statuses = [
        record("SUCCESS", id="audio-1", audioUrl="https://cdn/final.mp3", imageUrl="https://cdn/c.jpg")
    ]
    data = live_client.get("/api/status/task-1").json()
    assert data["status"] == "complete"
    assert data["audioUrl"] == "https://cdn/final.mp3"
    assert data["imageUrl"] == "https://cdn/c.jpg"
    assert data["lyrics"]["alignedWords"][0]["word"] == "hello"
    assert data["lyrics"]["alignedWords"][0]["startS"] == 0.5

    song = live_client.get(f"/api/result/{song_id}").json()
    assert song["output_url"] == "https://cdn/final.mp3"
    assert song["lyrics"]["alignedWords"][1]["word"] == "world"


def test_status_reports_provider_error(live_client, suno):
    suno.statuses = [{"code": 200, "data": {"status": "GENERATE_AUDIO_FAILED", "errorMessage": "no vocals"}}]
    data = live_client.get("/api/status/task-1").json()
    assert data["status"] == "error"
    assert data["error"] == "no vocals"


def test_status_lyrics_failure_does_not_block_audio(live_client, suno):
    suno.lyrics_response = httpx.Response(500)
    suno.statuses = [record("SUCCESS", id="audio-1", audioUrl="https://cdn/final.mp3")]
    resp = live_client.get("/api/status/task-1")
    assert resp.status_code == 200
    assert resp.json()["audioUrl"] == "https://cdn/final.mp3"


def test_status_inconsistent_complete_is_server_error(live_client, suno):
    suno.statuses = [record("SUCCESS", id="audio-1")]
    resp = live_client.get("/api/status/task-1")
    assert resp.status_code == 500
    assert resp.json()["success"] is False


def test_completed_task_fetches_lyrics_once(live_client, suno):
    song_id = live_client.post(
        "/api/generate", json={"fileUrl": AUDIO_URL, "style": "pop"}
    ).json()["songId"]
    suno.statuses = [record("SUCCESS", id="audio-1", audioUrl="https://cdn/final.mp3")]

    for _ in range(3):
        data = live_client.get("/api/status/task-1").json()
        assert data["lyrics"]["alignedWords"][0]["word"] == "hello"

    assert len(suno.calls("/generate/get-timestamped-lyrics")) == 1
    assert live_client.get(f"/api/result/{song_id}").json()["lyrics"] is not None


def test_failed_lyrics_are_not_refetched(live_client, suno):
    suno.lyrics_response = httpx.Response(500)
    suno.statuses = [record("SUCCESS", id="audio-1", audioUrl="https://cdn/final.mp3")]

    for _ in range(2):
        assert "lyrics" not in live_client.get("/api/status/task-1").json()

    assert len(suno.calls("/generate/get-timestamped-lyrics")) == 1


def test_generate_malformed_url_is_bad_request(live_client, suno):
    resp = live_client.post(
        "/api/generate", json={"fileUrl": "http://host:notaport/x.webm", "style": "pop"}
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "not accessible" in resp.json()["error"]

    song = live_client.get("/api/songs").json()["songs"][0]
    assert song["metadata"]["error"] == resp.json()["error"]


# --- error bodies ---


def test_validation_error_uses_error_body(mock_client):
    resp = mock_client.post("/api/generate", json=["not", "an", "object"])
    assert resp.status_code == 422
    data = resp.json()
    assert data["success"] is False
    assert data["error"]


def test_unknown_route_uses_error_body(mock_client):
    resp = mock_client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}
