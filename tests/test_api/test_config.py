import pytest
from pydantic import ValidationError

from apps.api.core.config import Settings
from apps.api.main import parse_args


def _build_settings(**values) -> Settings:
    return Settings.model_validate(values)


def test_cors_origins_normalizes_json_and_trailing_slash():
    settings = _build_settings(CORS_ORIGINS='["https://library.example.com/","http://localhost:5173"]')

    assert settings.CORS_ORIGINS == [
        "https://library.example.com",
        "http://localhost:5173",
    ]


def test_cors_origins_accepts_comma_separated_values():
    settings = _build_settings(CORS_ORIGINS="https://library.example.com/, http://localhost:5173 ")

    assert settings.CORS_ORIGINS == [
        "https://library.example.com",
        "http://localhost:5173",
    ]


def test_cors_origins_drops_duplicates_keeping_order():
    settings = _build_settings(CORS_ORIGINS="http://b.example,http://a.example,http://b.example/")

    assert settings.CORS_ORIGINS == ["http://b.example", "http://a.example"]


def test_cors_origins_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://one.example, http://two.example/")

    assert Settings().CORS_ORIGINS == ["http://one.example", "http://two.example"]


def test_cors_origins_empty_rejected():
    with pytest.raises(ValidationError, match="CORS_ORIGINS"):
        _build_settings(CORS_ORIGINS="  ")


def test_database_url_defaults_to_database_file():
    settings = _build_settings(DATABASE_FILE="data/library.db")

    assert settings.database_url == "sqlite:///data/library.db"


def test_database_url_override_wins():
    settings = _build_settings(DATABASE_FILE="data/library.db", DATABASE_URL="sqlite:///:memory:")

    assert settings.database_url == "sqlite:///:memory:"


def test_cover_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        _build_settings(COVER_API_TIMEOUT_SECONDS=0)


def test_log_level_is_normalized():
    assert _build_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    with pytest.raises(ValidationError, match="LOG_LEVEL"):
        _build_settings(LOG_LEVEL="chatty")


def test_port_must_be_a_valid_tcp_port():
    with pytest.raises(ValidationError, match="PORT"):
        _build_settings(PORT=70000)


def test_parse_args_defaults_come_from_settings():
    args = parse_args([], settings=_build_settings(HOST="127.0.0.1", PORT=8080))

    assert (args.host, args.port, args.reload) == ("127.0.0.1", 8080, False)


def test_parse_args_flags_override_settings():
    args = parse_args(
        ["--host", "localhost", "--port=9000", "--reload"],
        settings=_build_settings(HOST="127.0.0.1", PORT=8080),
    )

    assert (args.host, args.port, args.reload) == ("localhost", 9000, True)
