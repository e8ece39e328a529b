import pytest
from ratings.config import DEFAULT_CACHE_TTL_SECONDS, EngineSettings


class TestDefaults:
    def test_defaults(self):
        settings = EngineSettings()
        assert settings.cache_ttl_seconds == DEFAULT_CACHE_TTL_SECONDS == 300.0
        assert settings.cache_max_entries is None
        assert settings.reconcile_on_read is True
        assert settings.delivered_status == "delivered"
        assert settings.storage == "domain"

    def test_settings_are_immutable(self):
        settings = EngineSettings()
        with pytest.raises(AttributeError):
            settings.cache_ttl_seconds = 10


class TestValidation:
    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            EngineSettings(cache_ttl_seconds=0)

    def test_capacity_must_be_at_least_one(self):
        with pytest.raises(ValueError):
            EngineSettings(cache_max_entries=0)

    def test_unknown_storage(self):
        with pytest.raises(ValueError):
            EngineSettings(storage="redis")


class TestFromEnv:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RATINGS_CACHE_TTL_SECONDS", "30")
        monkeypatch.setenv("RATINGS_CACHE_MAX_ENTRIES", "100")
        monkeypatch.setenv("RATINGS_RECONCILE_ON_READ", "off")
        monkeypatch.setenv("RATINGS_DELIVERED_STATUS", "completed")
        monkeypatch.setenv("RATINGS_STORAGE", "memory")

        settings = EngineSettings.from_env()

        assert settings.cache_ttl_seconds == 30.0
        assert settings.cache_max_entries == 100
        assert settings.reconcile_on_read is False
        assert settings.delivered_status == "completed"
        assert settings.storage == "memory"

    def test_blank_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("RATINGS_CACHE_MAX_ENTRIES", "")
        monkeypatch.setenv("RATINGS_RECONCILE_ON_READ", " ")
        for name in ("RATINGS_CACHE_TTL_SECONDS", "RATINGS_DELIVERED_STATUS", "RATINGS_STORAGE"):
            monkeypatch.delenv(name, raising=False)

        settings = EngineSettings.from_env()

        assert settings.cache_max_entries is None
        assert settings.reconcile_on_read is True

    def test_bad_boolean_rejected(self, monkeypatch):
        monkeypatch.setenv("RATINGS_RECONCILE_ON_READ", "maybe")
        with pytest.raises(ValueError):
            EngineSettings.from_env()
