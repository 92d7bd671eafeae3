from __future__ import annotations

from collections.abc import Generator

import redis
from fastapi import Request

from slideship.config import get_redis_url
from slideship.session import PresentationSession


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        client.close()


def get_session(request: Request) -> PresentationSession:
    return request.app.state.session
