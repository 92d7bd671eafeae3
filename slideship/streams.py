from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, cast

import redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventStream:
    session_id: str

    @property
    def key(self) -> str:
        return f"slideship:events:{self.session_id}"


def publish_event(*, r: redis.Redis, stream: EventStream, fields: Mapping[str, object]) -> str | None:
    """Append an entry to a session's event stream.

    The outbox is best-effort: Redis failures are logged and the presentation
    carries on.
    """

    try:
        stream_id = r.xadd(stream.key, {str(k): str(v) for k, v in fields.items()})
    except redis.RedisError as e:
        logger.warning("could not publish %s to %s: %s", fields.get("type"), stream.key, e)
        return None
    return cast(str, stream_id)
