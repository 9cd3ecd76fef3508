"""Tests for /api/enrichment job endpoints."""

import pytest

from conftest import make_fact, make_job, make_log
from enrichment_tracker.core.exceptions import InvalidStateError, JobNotFoundError
from enrichment_tracker.core.models import JobStatus

JOB_ID = "6f1c2a6e-1f7b-4d7e-9a55-3f1f0d3c2b11"


class TestCreateJob:
    def test_creates_pending_job(self, client, job_repo):
        job_repo.create.return_value = make_job(id=JOB_ID)

        response = client.post("/api/enrichment", json={"domain": "https://www.Acme.com/about"})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["job"]["id"] == JOB_ID
        assert body["job"]["status"] == "pending"
        job_repo.create.assert_called_once_with("acme.com", metadata={}, llm_used="gpt-4o")

    def test_llm_choice_and_metadata(self, client, job_repo):
        job_repo.create.return_value = make_job(llm_used="claude-3-5-sonnet")
        client.post(
            "/api/enrichment",
            json={"domain": "acme.com", "llm_choice": "claude-3-5-sonnet", "metadata": {"k": 1}},
        )
        job_repo.create.assert_called_once_with(
            "acme.com", metadata={"k": 1}, llm_used="claude-3-5-sonnet"
        )

    def test_invalid_domain(self, client, job_repo):
        response = client.post("/api/enrichment", json={"domain": "localhost"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid domain"
        job_repo.create.assert_not_called()

    def test_bare_tld_after_www_rejected(self, client, job_repo):
        response = client.post("/api/enrichment", json={"domain": "www.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid domain"
        assert "www.com" in response.json()["message"]
        job_repo.create.assert_not_called()

    def test_missing_domain(self, client):
        response = client.post("/api/enrichment", json={})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert "domain" in body["message"]


class TestListJobs:
    def test_lists_with_total(self, client, job_repo):
        job_repo.list_jobs.return_value = ([make_job(), make_job(status="running")], 7)

        response = client.get("/api/enrichment", params={"status": "running", "limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert len(body["jobs"]) == 2
        assert body["total"] == 7
        kwargs = job_repo.list_jobs.call_args.kwargs
        assert kwargs["status"] == JobStatus.RUNNING
        assert kwargs["limit"] == 2

    def test_domain_filter_is_normalized(self, client, job_repo):
        job_repo.list_jobs.return_value = ([], 0)
        client.get("/api/enrichment", params={"domain": "WWW.Acme.com"})
        assert job_repo.list_jobs.call_args.kwargs["domain"] == "acme.com"

    def test_unknown_status(self, client):
        assert client.get("/api/enrichment", params={"status": "paused"}).status_code == 400

    def test_limit_bounds(self, client):
        assert client.get("/api/enrichment", params={"limit": 501}).status_code == 400
        assert client.get("/api/enrichment", params={"limit": 0}).status_code == 400


def test_dashboard_stats(client, job_repo):
    job_repo.get_dashboard_stats.return_value = {
        "total_jobs": 4,
        "completed_jobs": 3,
        "running_jobs": 1,
        "failed_jobs": 0,
        "success_rate": 75.0,
        "avg_confidence": 0.86,
        "facts_found": 10,
    }
    response = client.get("/api/enrichment/stats")
    assert response.status_code == 200
    assert response.json()["stats"] == {
        "totalJobs": 4,
        "completedJobs": 3,
        "runningJobs": 1,
        "failedJobs": 0,
        "successRate": 75.0,
        "avgConfidence": 0.86,
        "factsFound": 10,
    }


class TestGetJob:
    def test_full_detail(self, client, job_repo, fact_repo):
        job_repo.get.return_value = make_job(
            id=JOB_ID,
            status="running",
            crawling_status="completed",
            chunking_status="running",
            pages_scraped=12,
            total_runtime_seconds=30,
        )
        job_repo.get_logs.return_value = [make_log(message="Chunking")]
        fact_repo.find_by_job.return_value = [make_fact(confidence_score=0.9, tier_used=1)]
        fact_repo.job_statistics.return_value = {"total_facts": 1, "avg_confidence": 0.9}
        fact_repo.tier_statistics.return_value = {
            "tier_distribution": {1: 1},
            "tier_confidence": {1: 0.9},
        }

        response = client.get(f"/api/enrichment/{JOB_ID}")

        assert response.status_code == 200
        body = response.json()
        assert body["job"]["workflow"]["currentStep"] == "chunking"
        assert body["facts"][0]["confidence"] == 0.9
        assert body["facts"][0]["tier"] == 1
        assert body["statistics"]["total_facts"] == 1
        assert body["statistics"]["tier_distribution"] == {"1": 1}
        assert body["statistics"]["pagesScraped"] == 12
        assert body["statistics"]["runtime"] == 30
        assert body["logs"][0]["message"] == "Chunking"
        job_repo.get_logs.assert_called_once_with(JOB_ID, limit=20)

    def test_not_uuid_is_not_found(self, client, job_repo):
        response = client.get("/api/enrichment/not-a-uuid")
        assert response.status_code == 404
        assert response.json()["error"] == "Job not found"
        job_repo.get.assert_not_called()

    def test_unknown_job(self, client, job_repo):
        job_repo.get.return_value = None
        assert client.get(f"/api/enrichment/{JOB_ID}").status_code == 404


class TestDeleteJob:
    def test_deleted(self, client, job_repo):
        job_repo.delete.return_value = True
        response = client.delete(f"/api/enrichment/{JOB_ID}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Job deleted successfully"}

    def test_missing(self, client, job_repo):
        job_repo.delete.return_value = False
        assert client.delete(f"/api/enrichment/{JOB_ID}").status_code == 404


class TestLifecycle:
    def test_start_queues_job(self, client, job_repo):
        job_repo.queue_for_start.return_value = make_job(id=JOB_ID, retry_count=1)
        response = client.post(f"/api/enrichment/{JOB_ID}/start")
        assert response.status_code == 202
        assert response.json()["job"]["retry_count"] == 1

    def test_start_running_job_conflicts(self, client, job_repo):
        job_repo.queue_for_start.side_effect = InvalidStateError(JOB_ID, "running", "start")
        response = client.post(f"/api/enrichment/{JOB_ID}/start")
        assert response.status_code == 409
        assert response.json()["error"] == "Invalid job state"

    def test_start_missing_job(self, client, job_repo):
        job_repo.queue_for_start.side_effect = JobNotFoundError(JOB_ID)
        assert client.post(f"/api/enrichment/{JOB_ID}/start").status_code == 404

    def test_start_status(self, client, job_repo):
        job_repo.get.return_value = make_job(id=JOB_ID, status="running", crawling_status="running")
        body = client.get(f"/api/enrichment/{JOB_ID}/start").json()
        assert body["job_id"] == JOB_ID
        assert body["status"] == "running"
        assert body["steps"][0] == {"id": "crawling", "name": "Web Crawling", "status": "running"}

    def test_cancel(self, client, job_repo):
        job_repo.cancel.return_value = make_job(id=JOB_ID, status="cancelled")
        response = client.post(f"/api/enrichment/{JOB_ID}/cancel")
        assert response.status_code == 200
        assert response.json()["job"]["status"] == "cancelled"

    def test_cancel_finished_job_conflicts(self, client, job_repo):
        job_repo.cancel.side_effect = InvalidStateError(JOB_ID, "completed", "cancel")
        assert client.post(f"/api/enrichment/{JOB_ID}/cancel").status_code == 409


class TestJobLogs:
    def test_pagination(self, client, job_repo):
        job_repo.get.return_value = make_job(id=JOB_ID)
        job_repo.get_logs.return_value = [make_log(), make_log()]
        job_repo.count_logs.return_value = 5

        response = client.get(f"/api/enrichment/{JOB_ID}/logs", params={"limit": 2, "offset": 2})

        body = response.json()
        assert len(body["logs"]) == 2
        assert body["pagination"] == {"limit": 2, "offset": 2, "total": 5, "hasMore": True}

    def test_last_page(self, client, job_repo):
        job_repo.get.return_value = make_job(id=JOB_ID)
        job_repo.get_logs.return_value = [make_log()]
        job_repo.count_logs.return_value = 5
        body = client.get(f"/api/enrichment/{JOB_ID}/logs", params={"limit": 2, "offset": 4}).json()
        assert body["pagination"]["hasMore"] is False


@pytest.mark.parametrize("path", ["", "/stats"])
def test_database_failure_is_500(client, job_repo, path):
    job_repo.list_jobs.side_effect = RuntimeError("connection refused")
    job_repo.get_dashboard_stats.side_effect = RuntimeError("connection refused")
    response = client.get(f"/api/enrichment{path}")
    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal server error",
        "message": "An unexpected error occurred.",
    }
