"""Prometheus metrics for observability."""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("enrichment_app", "Enrichment tracker application info")

# Job metrics
jobs_created_counter = Counter(
    "enrichment_jobs_created_total",
    "Total number of enrichment jobs created through the API",
    ["llm"],
)

jobs_deleted_counter = Counter(
    "enrichment_jobs_deleted_total",
    "Total number of enrichment jobs deleted through the API",
)

job_transitions_counter = Counter(
    "enrichment_job_transitions_total",
    "Job status changes requested through the API",
    ["status"],
)

# Fact review metrics
fact_reviews_counter = Counter(
    "enrichment_fact_reviews_total",
    "Total number of fact approvals and rejections",
    ["decision"],
)

# API metrics
api_request_duration_histogram = Histogram(
    "enrichment_api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

api_requests_total = Counter(
    "enrichment_api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status_code"],
)
