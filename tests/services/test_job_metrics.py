"""Tests for the live job metric estimates."""

from datetime import timedelta

import pytest

from conftest import CREATED_AT, make_job
from enrichment_tracker.services.metrics import (
    completion_percentage,
    compute_job_metrics,
    elapsed_seconds,
)


class TestElapsed:
    def test_from_started_at(self):
        job = make_job(started_at=CREATED_AT)
        assert elapsed_seconds(job, CREATED_AT + timedelta(seconds=90)) == 90

    def test_falls_back_to_created_at(self):
        job = make_job(started_at=None)
        assert elapsed_seconds(job, CREATED_AT + timedelta(minutes=2)) == 120

    def test_never_negative(self):
        job = make_job(started_at=CREATED_AT)
        assert elapsed_seconds(job, CREATED_AT - timedelta(seconds=5)) == 0

    def test_naive_start(self):
        job = make_job(started_at=CREATED_AT.replace(tzinfo=None))
        assert elapsed_seconds(job, CREATED_AT + timedelta(seconds=10)) == 10


class TestCompletion:
    def test_completed(self):
        assert completion_percentage("completed", 3) == 100

    def test_running_scales_with_facts_and_caps(self):
        assert completion_percentage("running", 4) == 40
        assert completion_percentage("running", 50) == 90

    def test_other_statuses(self):
        assert completion_percentage("failed", 10) == 0


class TestComputeJobMetrics:
    def test_running_job(self):
        job = make_job(
            status="running", started_at=CREATED_AT, facts_extracted=10, pages_scraped=30
        )
        metrics = compute_job_metrics(job, CREATED_AT + timedelta(minutes=2))

        assert metrics["processingSpeed"] == {"value": 15.0, "unit": "pages/min", "trend": "stable"}
        assert metrics["tokenUsage"]["value"] == 1500
        assert metrics["apiCost"]["value"] == pytest.approx(0.03)
        assert metrics["completionPercentage"] == {"value": 90, "unit": "%", "trend": "up"}
        assert metrics["memoryUsage"]["value"] == 50
        assert metrics["elapsedTime"] == {"value": 120, "unit": "seconds", "trend": "up"}

    def test_memory_grows_with_facts(self):
        job = make_job(status="completed", started_at=CREATED_AT, facts_extracted=100)
        metrics = compute_job_metrics(job, CREATED_AT + timedelta(seconds=1))
        assert metrics["memoryUsage"]["value"] == 80
        assert metrics["completionPercentage"]["trend"] == "stable"

    def test_zero_elapsed_has_zero_speed(self):
        job = make_job(status="running", started_at=CREATED_AT, pages_scraped=10)
        metrics = compute_job_metrics(job, CREATED_AT)
        assert metrics["processingSpeed"]["value"] == 0.0
