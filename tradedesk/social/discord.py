from datetime import UTC, datetime

import httpx

from tradedesk.config import settings
from tradedesk.exceptions import ConfigurationError
from tradedesk.http import request_json

SOURCE = "Discord"
EMBED_COLOR = 0x7C3AED


class DiscordClient:
    """Bot-token access to a single trading channel."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        bot_token: str | None = None,
        channel_id: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self._http = http
        self._token = settings.discord_bot_token if bot_token is None else bot_token
        self._channel_id = settings.discord_channel_id if channel_id is None else channel_id
        self._base_url = (base_url or settings.discord_api_url).rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self._token and self._channel_id)

    def require_configured(self) -> None:
        if not self._token:
            raise ConfigurationError("TD_DISCORD_BOT_TOKEN", "Discord integration")
        if not self._channel_id:
            raise ConfigurationError("TD_DISCORD_CHANNEL_ID", "Discord integration")

    @property
    def _messages_url(self) -> str:
        return f"{self._base_url}/channels/{self._channel_id}/messages"

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self._token}"}

    async def recent_messages(self, limit: int = 100) -> list[dict]:
        self.require_configured()
        data = await request_json(
            self._http,
            "GET",
            self._messages_url,
            source=SOURCE,
            params={"limit": min(limit, 100)},
            headers=self._headers,
        )
        return data if isinstance(data, list) else []

    async def post_embed(self, content: str, title: str, fields: list[dict]) -> dict:
        self.require_configured()
        payload = {
            "content": content,
            "embeds": [
                {
                    "title": title,
                    "color": EMBED_COLOR,
                    "fields": fields,
                    "timestamp": datetime.now(UTC).isoformat(),
                    "footer": {"text": "tradedesk trading assistant"},
                }
            ],
        }
        data = await request_json(
            self._http, "POST", self._messages_url, source=SOURCE, json=payload, headers=self._headers
        )
        return data or {}
