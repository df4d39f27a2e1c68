from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "TD_", "env_file": ".env", "env_file_encoding": "utf-8"}

    llm_provider: str = Field(default="openai", pattern=r"^(openai|anthropic)$")
    llm_model: str = Field(default="")
    llm_timeout: float = Field(default=25.0, gt=0)
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(default="*")

    # Upstream data providers
    alpha_vantage_api_key: str = Field(default="")
    alpha_vantage_url: str = Field(default="https://www.alphavantage.co/query")
    stocktwits_url: str = Field(default="https://api.stocktwits.com/api/2")
    discord_api_url: str = Field(default="https://discord.com/api/v10")
    discord_bot_token: str = Field(default="")
    discord_channel_id: str = Field(default="")
    http_timeout: float = Field(default=10.0, gt=0)
    chat_quote_timeout: float = Field(default=3.0, gt=0)

    # Degraded modes, both off unless explicitly enabled
    allow_simulated_quotes: bool = Field(default=False)
    allow_estimated_options: bool = Field(default=False)

    # Signal thresholds
    sentiment_threshold: float = Field(default=0.15, ge=0.0, le=1.0)
    rsi_overbought: float = Field(default=70.0)
    rsi_oversold: float = Field(default=30.0)
    rsi_extreme_overbought: float = Field(default=75.0)
    rsi_extreme_oversold: float = Field(default=25.0)
    vix_calm: float = Field(default=15.0)
    vix_elevated: float = Field(default=20.0)
    vix_high: float = Field(default=25.0)
    vix_extreme: float = Field(default=30.0)

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
