"""hookhub entry point: wires config, logging, transport and server."""

from __future__ import annotations

import asyncio
import signal
import sys

import click

from hookhub.config import Settings, load_settings
from hookhub.transports import DryRunTransport, SlackTransport, Transport
from hookhub.utils.logging import get_logger, setup_logging
from hookhub.webhooks.server import WebhookServer

log = get_logger(__name__)


def create_transport(settings: Settings, dry_run: bool = False) -> Transport:
    if dry_run:
        return DryRunTransport()
    return SlackTransport(settings.slack)


async def run(settings: Settings, dry_run: bool = False) -> None:
    server = WebhookServer(settings, create_transport(settings, dry_run))

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    try:
        await server.start()
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await server.stop()


@click.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--dry-run", is_flag=True, help="Log notifications instead of posting to Slack")
def cli(config_path: str | None, log_level: str | None, dry_run: bool) -> None:
    """Relay GitHub webhooks to Slack."""
    settings = load_settings(config_path)
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    if not settings.slack.url and not dry_run:
        raise click.UsageError("slack.url is not configured (set HOOKHUB_SLACK__URL)")
    asyncio.run(run(settings, dry_run=dry_run))


if __name__ == "__main__":
    cli()
