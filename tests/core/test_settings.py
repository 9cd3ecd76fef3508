"""Tests for settings loading."""

from enrichment_tracker.core.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_LLM", raising=False)
        settings = Settings(_env_file=None)
        assert settings.default_llm == "gpt-4o"
        assert settings.api_port == 8000
        assert settings.metrics_enabled is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("API_PORT", "9001")
        monkeypatch.setenv("LOG_FORMAT", "console")
        settings = get_settings()
        assert settings.api_port == 9001
        assert settings.log_format == "console"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_database_host(self):
        settings = Settings(_env_file=None, database_url="postgresql://u:p@db.internal:5432/x")
        assert settings.database_host == "db.internal"

    def test_database_host_without_credentials(self):
        settings = Settings(_env_file=None, database_url="postgresql:///x")
        assert settings.database_host == "localhost"


class TestRequiredSettings:
    def test_reports_missing(self, monkeypatch):
        for name in ("OPENAI_API_KEY", "PINECONE_API_KEY", "PINECONE_INDEX_NAME"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.missing_required_settings() == [
            "OPENAI_API_KEY",
            "PINECONE_API_KEY",
            "PINECONE_INDEX_NAME",
        ]

    def test_nothing_missing(self):
        settings = Settings(
            _env_file=None,
            openai_api_key="sk-test",
            pinecone_api_key="pc-test",
            pinecone_index_name="facts",
        )
        assert settings.missing_required_settings() == []
