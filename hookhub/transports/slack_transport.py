"""Slack incoming-webhook transport using httpx."""

from __future__ import annotations

import json
from typing import Any

import httpx

from hookhub.config import SlackConfig
from hookhub.errors import DownstreamUnavailable
from hookhub.models import NotificationMessage
from hookhub.transports.base import Transport
from hookhub.utils.logging import get_logger

log = get_logger(__name__)


class SlackTransport(Transport):
    """POSTs notifications to a Slack incoming-webhook URL. No retries."""

    def __init__(
        self, config: SlackConfig, client: httpx.AsyncClient | None = None
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def platform_name(self) -> str:
        return "slack"

    async def send(self, message: NotificationMessage) -> Any:
        body = message.to_dict()
        log.debug("slack_post", channel=message.channel, body=body)

        try:
            resp = await self._client.post(self._config.url, json=body)
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise DownstreamUnavailable(
                f"Timed out after {self._config.timeout}s posting to Slack"
            ) from e
        except httpx.HTTPStatusError as e:
            raise DownstreamUnavailable(
                f"Slack returned {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise DownstreamUnavailable(f"Slack request failed: {e}") from e

        # Slack answers "ok" as plain text; other endpoints may return JSON
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return resp.text

    async def close(self) -> None:
        await self._client.aclose()


class DryRunTransport(Transport):
    """Logs notifications instead of sending them."""

    @property
    def platform_name(self) -> str:
        return "dry-run"

    async def send(self, message: NotificationMessage) -> Any:
        log.info("dry_run_message", channel=message.channel, body=message.to_dict())
        return {"dry_run": True}
