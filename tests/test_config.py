from smm_panel.core.config import parse_cors_origins


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://panel.example.com"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://panel.example.com",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_parse_cors_origins_bad_json_is_empty():
    assert parse_cors_origins("[not json") == []


def test_database_url_pins_installed_driver(monkeypatch):
    from smm_panel.core import database

    installed = {"psycopg2"}
    monkeypatch.setattr(database.importlib.util, "find_spec", lambda name: object() if name in installed else None)

    assert database._resolve_database_url("postgresql://u:p@db/panel") == "postgresql+psycopg2://u:p@db/panel"
    assert database._resolve_database_url("postgresql+psycopg://u:p@db/panel") == "postgresql+psycopg://u:p@db/panel"
    assert database._resolve_database_url("sqlite:///panel.db") == "sqlite:///panel.db"

    installed.clear()
    installed.add("psycopg")
    assert database._resolve_database_url("postgresql://u:p@db/panel") == "postgresql+psycopg://u:p@db/panel"


def test_engine_uses_psycopg2_driver():
    from smm_panel.core.database import engine

    assert engine.dialect.driver == "psycopg2"
