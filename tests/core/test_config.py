from __future__ import annotations

import pytest

from coursetrack.core.config import AppEnv, Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_ENV", "LOG_LEVEL", "LOG_JSON", "PORT", "SEED_SAMPLE_DATA"):
        monkeypatch.delenv(name, raising=False)


# ---- APP_ENV / LOG_LEVEL ----


def test_defaults_are_dev_and_info() -> None:
    settings = load_settings()
    assert (settings.app_env, settings.log_level) == ("dev", "info")
    assert settings.log_json is False
    assert settings.port == 8000


@pytest.mark.parametrize(
    ("app_env", "log_level", "expected"),
    [
        ("prod", "error", ("prod", "error")),
        ("PROD", "DEBUG", ("prod", "debug")),
        ("  test  ", "  warning  ", ("test", "warning")),
    ],
)
def test_app_env_and_log_level_are_normalized(
    monkeypatch: pytest.MonkeyPatch,
    app_env: str,
    log_level: str,
    expected: tuple[str, str],
) -> None:
    monkeypatch.setenv("APP_ENV", app_env)
    monkeypatch.setenv("LOG_LEVEL", log_level)
    settings = load_settings()
    assert (settings.app_env, settings.log_level) == expected


@pytest.mark.parametrize("raw", ["staging", ""])
def test_rejects_unknown_app_env(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("APP_ENV", raw)
    with pytest.raises(ValueError, match="APP_ENV must be"):
        load_settings()


@pytest.mark.parametrize("raw", ["verbose", ""])
def test_rejects_unknown_log_level(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("LOG_LEVEL", raw)
    with pytest.raises(ValueError, match="LOG_LEVEL must be"):
        load_settings()


def test_rejects_non_integer_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


def test_log_json_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "yes")
    assert load_settings().log_json is True


# ---- Settings ----


def _settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
    )


@pytest.mark.parametrize("app_env", ["dev", "test", "prod"])
def test_exactly_one_env_property_is_true(app_env: AppEnv) -> None:
    s = _settings(app_env)
    flags = {"dev": s.is_dev, "test": s.is_test, "prod": s.is_prod}
    assert [name for name, on in flags.items() if on] == [app_env]


def test_settings_is_frozen() -> None:
    s = _settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


def test_settings_defaults_cover_catalog_and_tokens() -> None:
    s = _settings()
    assert s.access_token_ttl_min == 60 * 24 * 7
    assert s.seed_sample_data is True
    assert s.cors_origins == ("http://localhost:3000",)


# ---- storage, auth and CORS settings ----


def test_load_settings_storage_urls_default_to_none(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("REDIS_URL", "   ")
    settings = load_settings()
    assert settings.database_url is None
    assert settings.redis_url is None


def test_load_settings_reads_storage_urls(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/ct")
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    settings = load_settings()
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/ct"
    assert settings.redis_url == "redis://cache:6379/0"


def test_load_settings_token_ttl_defaults_to_a_week(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("ACCESS_TOKEN_TTL_MIN", raising=False)
    assert load_settings().access_token_ttl_min == 7 * 24 * 60


@pytest.mark.parametrize("raw", ["0", "-5", "soon"])
def test_load_settings_rejects_bad_token_ttl(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("ACCESS_TOKEN_TTL_MIN", raw)
    with pytest.raises(ValueError, match="ACCESS_TOKEN_TTL_MIN"):
        load_settings()


def test_load_settings_splits_cors_origins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "CORS_ORIGINS", "https://app.example.com, http://localhost:3000,,"
    )
    assert load_settings().cors_origins == (
        "https://app.example.com",
        "http://localhost:3000",
    )


def test_seed_sample_data_defaults_off_in_prod(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("SEED_SAMPLE_DATA", raising=False)
    assert load_settings().seed_sample_data is False

    monkeypatch.setenv("APP_ENV", "dev")
    assert load_settings().seed_sample_data is True


def test_load_settings_rejects_bad_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match="LOG_JSON must be a boolean"):
        load_settings()
