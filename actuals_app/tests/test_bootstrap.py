from actuals_app.config import load_settings
from actuals_app.db.auto_init import auto_init, missing_tables
from actuals_app.db.session import build_engine


def test_auto_init_creates_missing_tables(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    try:
        assert {"projects", "project_actuals", "labor_entries", "audit_logs"} <= set(missing_tables(engine))

        auto_init(engine)
        assert missing_tables(engine) == []

        # 再次执行不报错
        auto_init(engine)
    finally:
        engine.dispose()


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("ACTUALS_MAX_RETRIES", "7")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.database_url == "sqlite:///elsewhere.db"
    assert settings.max_reconcile_retries == 7
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in ("DATABASE_URL", "ACTUALS_MAX_RETRIES", "SQLITE_BUSY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.database_url.startswith("sqlite:///")
    assert settings.database_url.endswith("actuals.db")
    assert settings.max_reconcile_retries == 3
    assert settings.sqlite_busy_timeout == 30
