"""Tracking pipeline: consume detections → track → publish.

Per camera:
1. XREADGROUP a batch from `detections:{camera_id}` (group: config.consumer_group)
2. Validate each entry as a DetectionFrameMessage
3. Run one tracking pass against this camera's own TrackerState
4. XADD a TrackedFrameMessage to `tracked_objects:{camera_id}`, then one
   AnnouncementEvent per fired announcement to `announcements`
5. XACK the entry

Entries are handled strictly one after another, so passes on a camera's state
never interleave.
"""
from __future__ import annotations

import time

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from assist_shared.events.publisher import (
    STREAM_ANNOUNCEMENTS,
    StreamEntry,
    ack,
    detections_stream,
    ensure_consumer_group,
    parse_event,
    publish,
    read_group,
    tracked_objects_stream,
)
from assist_shared.events.schemas import (
    AnnouncementEvent,
    DetectionFrameMessage,
    TrackedFrameMessage,
)
from assist_shared.logging import bind_camera, get_logger

from tracking.config import TrackingConfig
from tracking.engine import FrameInfo, PassResult, run_pass
from tracking.state import TrackerState

log = get_logger(__name__)


class TrackingPipeline:
    """Tracker plus stream plumbing for one camera.

    Args:
        camera_id: Camera identifier; selects the input and output streams.
        config: Tracking configuration, shared by every camera.
    """

    def __init__(self, camera_id: str, config: TrackingConfig) -> None:
        self._camera_id = camera_id
        self._cfg = config
        self._state = TrackerState()
        self._in_stream = detections_stream(camera_id)
        self._out_stream = tracked_objects_stream(camera_id)
        self._frames = 0
        self._announced = 0
        self._dropped = 0
        self._started = time.monotonic()

    @property
    def state(self) -> TrackerState:
        return self._state

    async def run(self, redis: aioredis.Redis) -> None:
        """Consume detection frames until the task is cancelled."""
        bind_camera(self._camera_id)
        await ensure_consumer_group(redis, self._in_stream, self._cfg.consumer_group)
        log.info(
            "tracking_pipeline_starting",
            in_stream=self._in_stream,
            out_stream=self._out_stream,
            consumer=self._cfg.consumer_name,
        )

        while True:
            entries = await read_group(
                redis,
                self._in_stream,
                self._cfg.consumer_group,
                self._cfg.consumer_name,
                count=self._cfg.read_batch,
                block_ms=self._cfg.block_ms,
            )
            for entry in entries:
                try:
                    await self.handle_entry(redis, entry)
                except Exception as exc:
                    log.error("tracking_frame_error", msg_id=entry.msg_id, error=str(exc))
                    # A bad entry is acked too, otherwise it is redelivered forever
                    await ack(redis, self._in_stream, self._cfg.consumer_group, entry.msg_id)

    def process_frame(self, message: DetectionFrameMessage) -> PassResult:
        """One tracking pass for a decoded frame. No I/O."""
        detections = message.detections
        if not message.detector_ok:
            log.warning("detector_unavailable", frame_seq=message.frame_seq)
            detections = []

        interval = message.frame_interval_ms
        if interval is None:
            interval = self._cfg.default_frame_interval_ms

        frame = FrameInfo(
            width=message.width,
            height=message.height,
            timestamp_ms=message.timestamp_ms,
            frame_interval_ms=interval,
        )
        return run_pass(self._state, detections, frame, self._cfg)

    async def handle_entry(self, redis: aioredis.Redis, entry: StreamEntry) -> None:
        message = parse_event(DetectionFrameMessage, entry.fields)
        result = self.process_frame(message)

        await publish(
            redis,
            self._out_stream,
            TrackedFrameMessage(
                camera_id=self._camera_id,
                timestamp_ms=message.timestamp_ms,
                frame_seq=message.frame_seq,
                objects=result.objects,
                announcement_count=len(result.announcements),
            ),
            maxlen=self._cfg.stream_maxlen,
        )
        for event in result.announcements:
            await self._announce(redis, event)

        await ack(redis, self._in_stream, self._cfg.consumer_group, entry.msg_id)
        self._frames += 1
        if self._frames % self._cfg.log_interval == 0:
            self._log_throughput()

    async def _announce(self, redis: aioredis.Redis, event: AnnouncementEvent) -> None:
        """Deliver once. A failed XADD drops the event; its cooldown still holds."""
        try:
            await publish(redis, STREAM_ANNOUNCEMENTS, event, maxlen=self._cfg.stream_maxlen)
        except RedisError as exc:
            self._dropped += 1
            log.warning(
                "announcement_dropped",
                track_id=event.track_id,
                label=event.label,
                error=str(exc),
            )
            return
        self._announced += 1
        log.info("announcement_published", track_id=event.track_id, phrase=event.phrase)

    def _log_throughput(self) -> None:
        elapsed = time.monotonic() - self._started
        log.info(
            "tracking_pipeline_throughput",
            frames=self._frames,
            fps=round(self._frames / elapsed, 1) if elapsed > 0 else 0.0,
            live_tracks=len(self._state.tracks),
            announced=self._announced,
            dropped=self._dropped,
        )
