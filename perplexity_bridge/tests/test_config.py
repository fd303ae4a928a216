import pytest
from pydantic import ValidationError

from perplexity_bridge.core.config import BridgeSettings


def test_bridge_settings_reads_env(monkeypatch):
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-env-key")
    monkeypatch.setenv("HTTP_PORT", "4000")
    monkeypatch.setenv("ENABLE_REST", "false")

    settings = BridgeSettings(_env_file=None)

    assert settings.perplexity_api_key.get_secret_value() == "pplx-env-key"
    assert settings.http_port == 4000
    assert settings.enable_rest is False
    assert settings.enable_stdio is True


def test_bridge_settings_defaults(monkeypatch):
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-env-key")
    monkeypatch.delenv("HTTP_PORT", raising=False)
    monkeypatch.delenv("ENABLE_REST", raising=False)
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)

    settings = BridgeSettings(_env_file=None)

    assert settings.http_port == 3001
    assert settings.enable_rest is True
    assert settings.request_timeout == 60.0
    assert str(settings.perplexity_api_base).startswith("https://api.perplexity.ai")


def test_missing_api_key_is_rejected(monkeypatch):
    monkeypatch.delenv("PERPLEXITY_API_KEY", raising=False)

    with pytest.raises(ValidationError) as excinfo:
        BridgeSettings(_env_file=None)

    assert any("perplexity_api_key" in error["loc"] for error in excinfo.value.errors())


def test_settings_are_frozen():
    settings = BridgeSettings(perplexity_api_key="pplx-test-key-1234", _env_file=None)

    with pytest.raises(ValidationError):
        settings.http_port = 9999


def test_masked_api_key_hides_the_middle():
    settings = BridgeSettings(perplexity_api_key="pplx-test-key-1234", _env_file=None)

    assert settings.masked_api_key() == "pplx***1234"
    assert "test" not in settings.masked_api_key()


@pytest.mark.parametrize("value", ["", "   "])
def test_blank_api_key_is_rejected(monkeypatch, value):
    monkeypatch.setenv("PERPLEXITY_API_KEY", value)

    with pytest.raises(ValidationError) as excinfo:
        BridgeSettings(_env_file=None)

    assert any("perplexity_api_key" in error["loc"] for error in excinfo.value.errors())


def test_api_key_is_stripped(monkeypatch):
    monkeypatch.setenv("PERPLEXITY_API_KEY", "  pplx-env-key\n")

    settings = BridgeSettings(_env_file=None)

    assert settings.perplexity_api_key.get_secret_value() == "pplx-env-key"
