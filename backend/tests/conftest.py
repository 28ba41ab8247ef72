"""
Shared fixtures: isolated settings per test and a scripted SunoAPI.org stub.
"""

import json

import httpx
import pytest

from vocalremix.config import Settings

AUDIO_URL = "https://cdn.example.com/uploads/audio_1_take.webm"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        upload_dir=tmp_path / "uploads",
        public_base_url="https://remix.example.com",
        suno_api_key="",
        openai_api_key="",
        mock_delay_seconds=0,
        analysis_mock_delay_seconds=0,
        poll_interval_seconds=0,
        watch_in_background=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def record(status: str, **track) -> dict:
    """A record-info payload with a single track."""
    return {
        "code": 200,
        "msg": "success",
        "data": {
            "taskId": "task-1",
            "status": status,
            "response": {"sunoData": [track] if track else []},
        },
    }


class SunoStub:
    """Routes httpx requests to canned SunoAPI.org answers and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.probe_status = 200
        self.probe_error: Exception | None = None
        self.submit_response: httpx.Response | Exception = httpx.Response(
            200, json={"code": 200, "msg": "success", "data": {"taskId": "task-1"}}
        )
        self.statuses: list[dict | httpx.Response | Exception] = [record("PENDING")]
        self.lyrics_response: httpx.Response | Exception = httpx.Response(
            200,
            json={
                "code": 200,
                "data": {
                    "alignedWords": [
                        {"word": "hello", "startS": 0.5, "endS": 0.9, "success": True, "palign": 0},
                        {"word": "world", "startS": 1.0, "endS": 1.4, "success": True, "palign": 0},
                    ],
                    "waveformData": [0.1, 0.2],
                    "hootCer": 0.1,
                    "isStreamed": False,
                },
            },
        )
        self._status_calls = 0

    def _answer(self, answer, request):
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, dict):
            return httpx.Response(200, json=answer)
        return answer

    def calls(self, path_suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    def json_body(self, path_suffix: str, index: int = -1) -> dict:
        return json.loads(self.calls(path_suffix)[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "HEAD":
            if self.probe_error is not None:
                raise self.probe_error
            return httpx.Response(self.probe_status, headers={"content-type": "audio/webm"})
        if path.endswith("/generate/add-instrumental"):
            return self._answer(self.submit_response, request)
        if path.endswith("/generate/record-info"):
            idx = min(self._status_calls, len(self.statuses) - 1)
            self._status_calls += 1
            return self._answer(self.statuses[idx], request)
        if path.endswith("/generate/get-timestamped-lyrics"):
            return self._answer(self.lyrics_response, request)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def live_settings(tmp_path):
    return make_settings(tmp_path, suno_api_key="test-key")


@pytest.fixture
def suno():
    return SunoStub()
