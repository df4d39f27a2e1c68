from typing import Any

import httpx

from tradedesk.config import settings
from tradedesk.exceptions import RateLimitError, UpstreamError, UpstreamTimeoutError

USER_AGENT = "tradedesk-api/0.1"


def create_http_client() -> httpx.AsyncClient:
    """The process-wide upstream client, opened and closed by the app lifespan."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout),
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


async def request_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    source: str,
    timeout: float | None = None,
    **kwargs: Any,
) -> Any:
    """Send a request and decode its JSON body, translating transport failures."""
    timeout = timeout or settings.http_timeout
    try:
        response = await http.request(method, url, timeout=timeout, **kwargs)
        response.raise_for_status()
        return response.json() if response.content else None
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError(source, timeout) from exc
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 429:
            raise RateLimitError(source) from exc
        raise UpstreamError(source, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(source, f"request failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamError(source, "malformed JSON response") from exc
