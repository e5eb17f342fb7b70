"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from summary_video.services.capture_driver import CancellationToken


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    from summary_video.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def jobs_db():
    from summary_video.routers import video as video_router

    video_router._jobs_db.clear()
    video_router._cancel_tokens.clear()
    yield video_router
    video_router._jobs_db.clear()
    video_router._cancel_tokens.clear()


def plan_body(video, summary, total_duration=None):
    body = {
        "video": video.model_dump(mode="json"),
        "summary": summary.model_dump(mode="json"),
    }
    if total_duration is not None:
        body["total_duration"] = total_duration
    return body


def fake_job(job_id, status="rendering"):
    return {
        "id": job_id,
        "video_id": "dQw4w9WgXcQ",
        "title": "t",
        "status": status,
        "progress": 0.5,
        "current_step": "Renderizando",
        "details": {},
        "created_at": "2024-01-01T00:00:00",
        "started_at": "2024-01-01T00:00:01",
        "completed_at": None,
        "error": None,
        "result": None,
    }


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestPlanEndpoint:

    def test_plan_with_duration(self, client, video, summary):
        response = client.post("/api/video/plan", json=plan_body(video, summary, 60))

        assert response.status_code == 200
        data = response.json()
        assert data["total_duration"] == 60
        assert len(data["segments"]) == 7
        assert data["segments"][0]["kind"] == "intro"
        assert data["segments"][1]["elements"][0]["animation"]["type"] == "typewriter"
        assert data["narration_script"].startswith("Welcome")

    def test_plan_estimates_duration(self, client, video, summary):
        data = client.post("/api/video/plan", json=plan_body(video, summary)).json()
        assert 30 <= data["total_duration"] <= 120
        assert data["segments"][-1]["end"] == data["total_duration"]

    def test_invalid_duration(self, client, video, summary):
        response = client.post("/api/video/plan", json=plan_body(video, summary, 0))
        assert response.status_code == 400

    @pytest.mark.parametrize("total", ["inf", "nan", 5e-324])
    def test_non_finite_or_tiny_duration(self, client, video, summary, total):
        response = client.post("/api/video/plan", json=plan_body(video, summary, total))
        assert response.status_code == 400


class TestJobsEndpoints:

    def test_unknown_job(self, client, jobs_db):
        assert client.get("/api/jobs/missing").status_code == 404
        assert client.get("/api/jobs/missing/status").status_code == 404

    def test_cancel_running_job(self, client, jobs_db):
        token = CancellationToken()
        jobs_db._jobs_db["job1"] = fake_job("job1")
        jobs_db._cancel_tokens["job1"] = token

        response = client.post("/api/jobs/job1/cancel")

        assert response.status_code == 200
        assert token.cancelled
        assert client.get("/api/jobs/job1").json()["status"] == "cancelled"

    def test_cannot_cancel_finished_job(self, client, jobs_db):
        jobs_db._jobs_db["job1"] = fake_job("job1", status="completed")
        assert client.post("/api/jobs/job1/cancel").status_code == 400

    def test_result_of_completed_job(self, client, jobs_db):
        job = fake_job("job1", status="completed")
        job["completed_at"] = "2024-01-01T00:00:31"
        job["result"] = {
            "download_handle": "/outputs/summary_x_job1.mp4",
            "thumbnail_handle": "/outputs/thumbnail_x_job1.jpg",
            "duration": 60.0,
            "segments": [{}, {}, {}],
            "is_placeholder": False,
        }
        jobs_db._jobs_db["job1"] = job

        data = client.get("/api/jobs/job1/result").json()

        assert data["video_url"] == "/outputs/summary_x_job1.mp4"
        assert data["segments_count"] == 3
        assert data["processing_time_seconds"] == 30

    def test_list_and_delete(self, client, jobs_db):
        jobs_db._jobs_db["job1"] = fake_job("job1")

        assert client.get("/api/jobs").json()["total"] == 1
        assert client.delete("/api/jobs/job1").status_code == 200
        assert client.get("/api/jobs").json()["total"] == 0


class TestConfigEndpoints:

    def test_defaults(self, client):
        data = client.get("/api/config").json()
        assert data["render"]["fps"] == 30
        assert data["narration"]["words_per_minute"] == 150

    def test_patch_narration(self, client):
        response = client.patch(
            "/api/config/narration",
            json={"words_per_minute": 120, "min_duration": 10, "max_duration": 90},
        )

        assert response.status_code == 200
        assert client.get("/api/config").json()["narration"]["max_duration"] == 90
