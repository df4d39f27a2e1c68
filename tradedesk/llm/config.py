from enum import StrEnum


class LLMProvider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


# used when TD_LLM_MODEL is empty
DEFAULT_MODELS = {
    LLMProvider.OPENAI: "gpt-4o",
    LLMProvider.ANTHROPIC: "claude-3-5-sonnet-latest",
}

DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 1500
