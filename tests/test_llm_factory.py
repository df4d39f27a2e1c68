import pytest
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from tradedesk.exceptions import AppError, ConfigurationError
from tradedesk.llm.factory import LLMFactory


def test_missing_key_is_a_configuration_error(test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "openai_api_key", "")
    with pytest.raises(ConfigurationError, match="TD_OPENAI_API_KEY"):
        LLMFactory.create(provider="openai")


def test_provider_default_model(test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(test_settings, "llm_model", "")
    llm = LLMFactory.create(provider="openai")
    assert isinstance(llm, ChatOpenAI)
    assert llm.model_name == "gpt-4o"


def test_configured_model_wins(test_settings, monkeypatch):
    monkeypatch.setattr(test_settings, "anthropic_api_key", "sk-ant-test")
    monkeypatch.setattr(test_settings, "llm_model", "claude-3-5-haiku-latest")
    llm = LLMFactory.create(provider="anthropic")
    assert isinstance(llm, ChatAnthropic)
    assert llm.model == "claude-3-5-haiku-latest"


def test_unknown_provider():
    with pytest.raises(AppError) as exc_info:
        LLMFactory.create(provider="gemini")
    assert exc_info.value.code == "LLM_CONFIG_ERROR"
