import pytest

from bunktrack.core import ConfigurationError, load_app_settings


def test_defaults(monkeypatch):
    for name in ("PORT", "DEFAULT_REQUIRED_PERCENT", "ATTENDED_OVER_TOTAL"):
        monkeypatch.delenv(name, raising=False)

    settings = load_app_settings(_env_file=None)

    assert settings.PORT == 8000
    assert settings.DEFAULT_REQUIRED_PERCENT == 75
    assert settings.ATTENDED_OVER_TOTAL == "allow"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("ATTENDED_OVER_TOTAL", "clamp")
    monkeypatch.setenv("DEFAULT_REQUIRED_PERCENT", "80")

    settings = load_app_settings(_env_file=None)

    assert settings.ATTENDED_OVER_TOTAL == "clamp"
    assert settings.DEFAULT_REQUIRED_PERCENT == 80


@pytest.mark.parametrize(
    "name,value", [("ATTENDED_OVER_TOTAL", "sometimes"), ("DEFAULT_REQUIRED_PERCENT", "0")]
)
def test_invalid_values_raise_configuration_error(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        load_app_settings(_env_file=None)
