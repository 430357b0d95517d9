"""Webhook HTTP server using aiohttp."""

from __future__ import annotations

from typing import Any

import structlog
from aiohttp import web

from hookhub.config import Settings
from hookhub.errors import HookhubError
from hookhub.transports.base import Transport
from hookhub.utils.logging import get_logger
from hookhub.webhooks.handlers import verify_request
from hookhub.webhooks.transformer import generate_message

log = get_logger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature"
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


def _reply(result: str, message: Any, status: int = 200) -> web.Response:
    return web.json_response({"result": result, "message": message}, status=status)


class WebhookServer:
    """Receives GitHub webhooks and relays them to the chat transport."""

    def __init__(self, settings: Settings, transport: Transport) -> None:
        self._settings = settings
        self._transport = transport
        self._runner: web.AppRunner | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if not self._settings.github.secret:
            log.warning(
                "webhook_no_secret",
                msg="No GitHub secret configured; all requests will be rejected.",
            )
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        server = self._settings.server
        site = web.TCPSite(self._runner, server.bind, server.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=server.bind,
            port=server.port,
            path_prefix=server.path_prefix,
            transport=self._transport.platform_name,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        await self._transport.close()
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        prefix = self._settings.server.path_prefix.strip("/")
        if prefix:
            # The bare prefix is accepted as well as anything below it
            app.router.add_post(f"/{prefix}", self._handle_webhook)
            app.router.add_post(f"/{prefix}/{{tail:.*}}", self._handle_webhook)
        else:
            app.router.add_post("/{tail:.*}", self._handle_webhook)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        with structlog.contextvars.bound_contextvars(
            delivery=request.headers.get(DELIVERY_HEADER, "")
        ):
            return await self._relay(request)

    async def _relay(self, request: web.Request) -> web.Response:
        body = await request.read()
        github = self._settings.github

        try:
            event = verify_request(
                request.headers.get(SIGNATURE_HEADER),
                request.headers.get(EVENT_HEADER),
                body,
                github.secret,
                reject_status=github.reject_status,
            )
            message = generate_message(
                event.event_type, event.payload, self._settings.slack.options
            )
            data = await self._transport.send(message)
        except HookhubError as e:
            if e.status >= 500:
                log.error("webhook_relay_failed", error=e.message)
            else:
                log.info("webhook_rejected", status=e.status, reason=e.message)
            return _reply("ERROR", e.message, status=e.status)

        log.info(
            "webhook_relayed",
            event_type=event.event_type,
            sections=len(message.sections),
            transport=self._transport.platform_name,
        )
        return _reply("OK", data)
