from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from tradedesk.config import settings
from tradedesk.exceptions import AppError, ConfigurationError
from tradedesk.llm.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODELS,
    DEFAULT_TEMPERATURE,
    LLMProvider,
)


class LLMFactory:
    @staticmethod
    def create(
        provider: str | None = None,
        model: str | None = None,
        **kwargs: object,
    ) -> BaseChatModel:
        provider = provider or settings.llm_provider
        kwargs.setdefault("timeout", settings.llm_timeout)
        kwargs.setdefault("temperature", DEFAULT_TEMPERATURE)
        kwargs.setdefault("max_tokens", DEFAULT_MAX_TOKENS)

        match provider:
            case LLMProvider.OPENAI:
                api_key = settings.openai_api_key
                if not api_key:
                    raise ConfigurationError("TD_OPENAI_API_KEY", "AI chat and analysis")
                model = model or settings.llm_model or DEFAULT_MODELS[LLMProvider.OPENAI]
                return ChatOpenAI(model=model, api_key=api_key, **kwargs)  # type: ignore[arg-type]

            case LLMProvider.ANTHROPIC:
                api_key = settings.anthropic_api_key
                if not api_key:
                    raise ConfigurationError("TD_ANTHROPIC_API_KEY", "AI chat and analysis")
                model = model or settings.llm_model or DEFAULT_MODELS[LLMProvider.ANTHROPIC]
                return ChatAnthropic(model=model, api_key=api_key, **kwargs)  # type: ignore[arg-type]

            case _:
                raise AppError(f"Unknown LLM provider: '{provider}'", code="LLM_CONFIG_ERROR")
