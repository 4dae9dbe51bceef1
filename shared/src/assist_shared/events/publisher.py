"""Redis Streams helpers shared by the tracker and its collaborators.

Every entry carries two fields: ``type`` (the schema class name, so a reader
on a mixed stream can dispatch) and ``data`` (the model as JSON).
"""
from __future__ import annotations

from typing import NamedTuple, TypeVar

from redis.asyncio import Redis
from redis.exceptions import ResponseError

from assist_shared.events.schemas import _FrozenModel

ModelT = TypeVar("ModelT", bound=_FrozenModel)

# Per-camera streams are formatted with the camera id
STREAM_DETECTIONS = "detections:{camera_id}"
STREAM_TRACKED_OBJECTS = "tracked_objects:{camera_id}"
STREAM_ANNOUNCEMENTS = "announcements"

GROUP_TRACKING = "tracking-workers"


class StreamEntry(NamedTuple):
    msg_id: str
    fields: dict[str, str]


def detections_stream(camera_id: str) -> str:
    return STREAM_DETECTIONS.format(camera_id=camera_id)


def tracked_objects_stream(camera_id: str) -> str:
    return STREAM_TRACKED_OBJECTS.format(camera_id=camera_id)


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


async def publish(
    redis: Redis,
    stream: str,
    event: _FrozenModel,
    maxlen: int = 1000,
) -> str:
    """XADD one event, trimming the stream to roughly ``maxlen`` entries.

    Returns:
        The Redis message ID of the new entry.
    """
    fields = {"type": type(event).__name__, "data": event.model_dump_json()}
    msg_id = await redis.xadd(stream, fields, maxlen=maxlen, approximate=True)
    return _text(msg_id)


def parse_event(model: type[ModelT], fields: dict[str, str]) -> ModelT:
    """Validate the ``data`` field of a stream entry as ``model``.

    Raises:
        pydantic.ValidationError: missing or malformed payload.
    """
    return model.model_validate_json(fields.get("data", "{}"))


async def ensure_consumer_group(
    redis: Redis,
    stream: str,
    group: str,
    start_id: str = "0",
) -> None:
    """Create ``group`` on ``stream`` (and the stream itself) unless it exists."""
    try:
        await redis.xgroup_create(stream, group, id=start_id, mkstream=True)
    except ResponseError as exc:
        if "BUSYGROUP" not in str(exc):
            raise


async def read_group(
    redis: Redis,
    stream: str,
    group: str,
    consumer: str,
    count: int = 10,
    block_ms: int = 1000,
) -> list[StreamEntry]:
    """Read new entries for ``consumer``; ids, keys and values come back as str."""
    results = await redis.xreadgroup(
        groupname=group,
        consumername=consumer,
        streams={stream: ">"},
        count=count,
        block=block_ms,
    )
    entries: list[StreamEntry] = []
    for _stream, batch in results or []:
        for msg_id, fields in batch:
            entries.append(
                StreamEntry(
                    _text(msg_id),
                    {_text(k): _text(v) for k, v in fields.items()},
                )
            )
    return entries


async def ack(redis: Redis, stream: str, group: str, *msg_ids: str) -> None:
    await redis.xack(stream, group, *msg_ids)
