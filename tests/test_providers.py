import pytest

from mcp_bridge.providers import Provider, get_api_key


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr("mcp_bridge.providers.load_dotenv", lambda: None)


def test_reads_key_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
    assert get_api_key(Provider.OPENAI) == "sk-from-env"


def test_gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    assert get_api_key(Provider.GEMINI) == "g-key"


def test_empty_key_counts_as_missing(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY missing"):
        get_api_key(Provider.OPENAI)


def test_unknown_provider():
    with pytest.raises(RuntimeError, match="No config"):
        get_api_key("anthropic")
