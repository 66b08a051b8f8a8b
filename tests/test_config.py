from src.dispatch.config import Settings


def test_origins_parse_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("DISPATCH_FRONTEND_ALLOWED_ORIGINS", "http://a.test, http://b.test")
    settings = Settings(_env_file=None)
    assert settings.frontend_allowed_origins == ("http://a.test", "http://b.test")


def test_origins_parse_from_json_env(monkeypatch):
    monkeypatch.setenv("DISPATCH_FRONTEND_ALLOWED_ORIGINS", '["http://a.test"]')
    settings = Settings(_env_file=None)
    assert settings.frontend_allowed_origins == ("http://a.test",)


def test_defaults_and_log_level(monkeypatch):
    monkeypatch.setenv("DISPATCH_LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.log_level == "DEBUG"
    assert settings.api_prefix == "/api"
    assert settings.nearest_customers_limit == 3
