"""Application entrypoint."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from pydantic import ValidationError

from slack_monitor.chat.base import AuthError
from slack_monitor.chat.slack import SlackClient
from slack_monitor.config import Settings, load_settings
from slack_monitor.monitor import CycleEngine
from slack_monitor.notify.ntfy import NtfyNotifier
from slack_monitor.scheduler import MonitorScheduler
from slack_monitor.state import WatermarkStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
LOGGER = logging.getLogger(__name__)


async def run(settings: Settings) -> None:
    """Authenticate, load state, and monitor until SIGINT or SIGTERM."""

    chat = SlackClient(
        xoxc_token=settings.slack_xoxc_token,
        xoxd_token=settings.slack_xoxd_token,
        base_url=settings.slack_api_url,
        request_timeout_seconds=settings.request_timeout_seconds,
    )
    notifier = NtfyNotifier(
        topic=settings.ntfy_topic,
        base_url=settings.ntfy_base_url,
        min_interval_seconds=settings.notification_min_interval_seconds,
    )
    store = WatermarkStore(settings.state_path)

    self_user_id = await chat.authenticate()
    try:
        state = store.load()
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Failed to load state: {exc}") from exc

    engine = CycleEngine(
        chat=chat,
        notifier=notifier,
        store=store,
        self_user_id=self_user_id,
        state=state,
        preview_chars=settings.notification_preview_chars,
    )
    scheduler = MonitorScheduler(engine.run_sweep, settings.poll_interval_seconds)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop, scheduler, sig)

    LOGGER.info("Starting monitoring (poll interval %ss)", settings.poll_interval_seconds)
    try:
        await scheduler.run_forever()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        engine.persist()
        LOGGER.info("Monitoring stopped")


def _request_stop(scheduler: MonitorScheduler, sig: signal.Signals) -> None:
    LOGGER.info("Received signal %s, shutting down gracefully...", sig.name)
    scheduler.stop()


def main() -> None:
    """Synchronous wrapper for asyncio entrypoint."""

    LOGGER.info("Slack Monitor starting...")
    try:
        settings = load_settings()
    except ValidationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    try:
        asyncio.run(run(settings))
    except AuthError as exc:
        LOGGER.error("Slack authentication failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
