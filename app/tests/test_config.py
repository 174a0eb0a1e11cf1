from app.config import Settings, settings


def test_settings_loaded_from_environment():
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///:memory:"
    assert settings.is_sqlite
    assert not settings.is_redis_enabled
    assert settings.API_PREFIX == "/api/v1"


def test_allowed_origins_list():
    config = Settings(
        DATABASE_URL="postgresql://u:p@localhost/rapphim",
        ALLOWED_ORIGINS="http://localhost:3000, https://rapphim.vn",
    )
    assert config.allowed_origins_list == ["http://localhost:3000", "https://rapphim.vn"]
    assert not config.is_sqlite


def test_redis_enabled_when_url_set():
    config = Settings(DATABASE_URL="sqlite+aiosqlite://", REDIS_URL="redis://localhost:6379/0")
    assert config.is_redis_enabled


def test_parse_database_url():
    from app.database import parse_database_url

    assert parse_database_url("sqlite+aiosqlite:///./rapphim.db") == ("sqlite+aiosqlite:///./rapphim.db", {})
    assert parse_database_url("postgresql://u:p@db/rapphim?sslmode=require") == (
        "postgresql+asyncpg://u:p@db/rapphim",
        {"ssl": "require"},
    )


def test_gunicorn_config(monkeypatch):
    import runpy
    from pathlib import Path

    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("WEB_CONCURRENCY", "3")

    config = runpy.run_path(str(Path(__file__).resolve().parents[2] / "gunicorn.conf.py"))

    assert config["wsgi_app"] == "app.main:app"
    assert config["worker_class"] == "uvicorn.workers.UvicornWorker"
    assert config["bind"] == "127.0.0.1:9000"
    assert config["workers"] == 3
    assert "app" in config["logconfig_dict"]["loggers"]
