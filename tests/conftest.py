from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI, we *don't* auto-load `.env` by default so a developer's local
    settings can't leak into the run.
    Opt-in with: SLIDESHIP_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("CI") and os.environ.get("SLIDESHIP_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(scope="session", autouse=True)
def _hermetic_presentation_env(_load_dotenv_for_tests: None) -> None:
    """Point the app at the fixture deck and switch off background polling."""

    os.environ["SLIDESHIP_SOURCE"] = str(FIXTURES / "deck.md")
    os.environ["SLIDESHIP_POLL_INTERVAL_S"] = "0"


@pytest.fixture()
def deck_text() -> str:
    return (FIXTURES / "deck.md").read_text(encoding="utf-8")


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient with fakeredis injected as the event outbox."""

    from slideship.api.deps import get_redis
    from slideship.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
