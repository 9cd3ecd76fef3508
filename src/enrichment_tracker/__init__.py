"""Enrichment Tracker - REST API over company enrichment jobs and facts."""

__version__ = "1.0.0"
