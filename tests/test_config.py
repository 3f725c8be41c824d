"""
tests/test_config.py

Environment-driven settings and database URL resolution.
"""

from __future__ import annotations

import pytest

from db.config import normalize_database_url, resolve_database_url
from edge_config.config import PreviewOptions, get_edge_config_settings, parse_cdn_config
from edge_config.errors import ConfigurationError

ENV_VARS = (
    "EDGE_CONFIG_BUCKET",
    "EDGE_CONFIG_PREVIEW_BUCKET",
    "EDGE_CDN_PROVIDER",
    "EDGE_CDN_CONFIG",
    "EDGE_RENDERER_URL",
    "EDGE_PREVIEW_WARMUP_DELAY_MS",
    "EDGE_PREVIEW_MAX_RETRIES",
    "EDGE_PREVIEW_RETRY_DELAY_MS",
    "EDGE_HTTP_TIMEOUT_SECONDS",
    "EDGE_CONFIG_EXTRA_MAPPERS",
    "EDGE_CONFIG_ROLLBACK_CLEARS_FORCE_FAIL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_edge_config_settings.cache_clear()
    yield
    get_edge_config_settings.cache_clear()


# ---------------------------------------------------------------------------
# Engine settings
# ---------------------------------------------------------------------------


class TestEdgeConfigSettings:
    def test_bucket_is_required(self) -> None:
        with pytest.raises(ConfigurationError, match="EDGE_CONFIG_BUCKET is required"):
            get_edge_config_settings()

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDGE_CONFIG_BUCKET", "configs")

        settings = get_edge_config_settings()

        assert settings.preview_bucket == "configs-preview"
        assert settings.cdn_provider is None
        assert settings.cdn_config == {}
        assert settings.preview == PreviewOptions(warmup_delay_ms=2000, max_retries=3, retry_delay_ms=1000)
        assert settings.rollback_clears_force_fail is True
        assert settings.extra_mappers == ()

    def test_reads_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDGE_CONFIG_BUCKET", "configs")
        monkeypatch.setenv("EDGE_CDN_PROVIDER", "Fastly")
        monkeypatch.setenv("EDGE_CDN_CONFIG", '{"Fastly": {"serviceId": "svc", "apiToken": "t"}}')
        monkeypatch.setenv("EDGE_PREVIEW_MAX_RETRIES", "-4")
        monkeypatch.setenv("EDGE_PREVIEW_RETRY_DELAY_MS", "not-a-number")
        monkeypatch.setenv("EDGE_CONFIG_EXTRA_MAPPERS", "pkg.mod:One, pkg.mod:Two ,")
        monkeypatch.setenv("EDGE_CONFIG_ROLLBACK_CLEARS_FORCE_FAIL", "no")

        settings = get_edge_config_settings()

        assert settings.cdn_provider == "fastly"
        assert settings.cdn_config == {"fastly": {"serviceId": "svc", "apiToken": "t"}}
        assert settings.preview.max_retries == 0
        assert settings.preview.retry_delay_ms == 1000
        assert settings.extra_mappers == ("pkg.mod:One", "pkg.mod:Two")
        assert settings.rollback_clears_force_fail is False

    def test_settings_are_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDGE_CONFIG_BUCKET", "configs")
        assert get_edge_config_settings() is get_edge_config_settings()


class TestParseCdnConfig:
    def test_empty(self) -> None:
        assert parse_cdn_config(None) == {}
        assert parse_cdn_config("  ") == {}

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '{"cloudflare": "token"}'])
    def test_malformed(self, raw: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_cdn_config(raw)


class TestPreviewOptions:
    def test_rejects_negative_values(self) -> None:
        with pytest.raises(ValueError):
            PreviewOptions(max_retries=-1)
        with pytest.raises(ValueError):
            PreviewOptions(warmup_delay_ms=-1)


# ---------------------------------------------------------------------------
# Database URL
# ---------------------------------------------------------------------------


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
            ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
            ("sqlite:///local.db", "sqlite:///local.db"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_database_url(raw) == expected

    def test_prefers_engine_specific_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDGE_CONFIG_DATABASE_URL", "sqlite:///edge.db")
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@h/db")
        assert resolve_database_url() == "sqlite:///edge.db"

    def test_missing_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EDGE_CONFIG_DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setattr("db.config.load_env_files", lambda: None)
        with pytest.raises(RuntimeError, match="No database URL configured"):
            resolve_database_url()
