from __future__ import annotations

from typing import Optional

import httpx

from shared.log import get_logger

logger = get_logger(__name__)

SLACK_API_BASE = "https://slack.com/api"
CONNECTIONS_OPEN_PATH = "/apps.connections.open"


class EndpointUnavailable(Exception):
    """Raised when Slack does not hand out a socket mode URL."""
    pass


def create_slack_client(app_token: str, base_url: str = SLACK_API_BASE,
                        transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """
    Build an HTTP client authenticated with the app-level token (``xapp-...``).

    Args:
        app_token: App-level token with the ``connections:write`` scope
        base_url: Slack Web API base URL
        transport: Optional transport override
    """
    headers = {
        "Authorization": f"Bearer {app_token}",
        "Content-Type": "application/x-www-form-urlencoded",
    }
    return httpx.AsyncClient(base_url=base_url, headers=headers, timeout=30.0, transport=transport)


class EndpointResolver:
    """
    Fetches a fresh WebSocket URL from ``apps.connections.open``.

    Requires Socket Mode to be enabled for the Slack app. Every call is a
    single round trip; retrying is the caller's decision.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def resolve(self) -> str:
        logger.info("Requesting websocket endpoint from Slack")
        try:
            response = await self.client.post(CONNECTIONS_OPEN_PATH)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise EndpointUnavailable(f"apps.connections.open returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise EndpointUnavailable(f"apps.connections.open failed: {e}") from e
        except ValueError as e:
            raise EndpointUnavailable(f"apps.connections.open returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise EndpointUnavailable("apps.connections.open returned a non-object body")
        if data.get("ok") is False:
            raise EndpointUnavailable(f"apps.connections.open refused: {data.get('error', 'unknown_error')}")

        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise EndpointUnavailable("url not found in apps.connections.open response")

        logger.info("Received websocket endpoint", extra={"connection_url": url})
        return url

    async def aclose(self) -> None:
        await self.client.aclose()
