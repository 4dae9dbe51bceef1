"""Tracking service entry point."""
from __future__ import annotations

import asyncio
import signal

from assist_shared.logging import configure_logging, get_logger
from assist_shared.redis_client import close_redis, get_redis
from assist_shared.settings import settings

from tracking.config import build_config
from tracking.pipeline import TrackingPipeline

log = get_logger(__name__)


async def run() -> None:
    configure_logging(settings.log_format, settings.log_level, service="tracking")
    config = build_config(settings)

    if not config.camera_ids:
        log.error("tracking_no_cameras_configured")
        return

    log.info(
        "tracking_service_starting",
        cameras=config.camera_ids,
        very_close=config.proximity.very_close,
        getting_close=config.proximity.getting_close,
        cooldown_ms=config.alert_policy.cooldown_ms,
    )

    redis = get_redis(config.redis_url)

    # Each camera gets its own task and its own TrackerState
    tasks = [
        asyncio.create_task(TrackingPipeline(cam_id, config).run(redis), name=f"tracking:{cam_id}")
        for cam_id in config.camera_ids
    ]

    def _shutdown(sig, frame):
        log.info("shutdown_signal_received", signal=sig)
        for task in tasks:
            task.cancel()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        await asyncio.gather(*tasks)
    except asyncio.CancelledError:
        pass
    finally:
        await redis.aclose()
        await close_redis()
        log.info("tracking_service_stopped")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
