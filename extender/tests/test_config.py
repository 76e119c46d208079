from extender.app.core.config import (
    DEFAULT_DSS_SERVICE_URL,
    DEFAULT_TSA_URL,
    Settings,
)


def test_defaults(monkeypatch):
    for name in (
        "DSS_SERVICE_URL",
        "DSS_CONNECT_TIMEOUT_SECONDS",
        "DSS_READ_TIMEOUT_SECONDS",
        "DEFAULT_TSA_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.dss_service_url == DEFAULT_DSS_SERVICE_URL
    assert settings.dss_enabled
    assert settings.dss_connect_timeout_seconds == 10.0
    assert settings.dss_read_timeout_seconds == 60.0
    assert settings.default_tsa_url == DEFAULT_TSA_URL


def test_service_url_from_environment(monkeypatch):
    monkeypatch.setenv("DSS_SERVICE_URL", " https://dss.example.test/ ")

    settings = Settings(_env_file=None)

    assert settings.dss_service_url == "https://dss.example.test"


def test_blank_service_url_disables_extension(monkeypatch):
    monkeypatch.setenv("DSS_SERVICE_URL", "")

    assert not Settings(_env_file=None).dss_enabled


def test_p12_password_is_redacted(monkeypatch):
    monkeypatch.setenv("SIGNING_P12_PASSWORD", "hunter2")

    settings = Settings(_env_file=None)

    assert settings.signing_p12_password.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(settings)
