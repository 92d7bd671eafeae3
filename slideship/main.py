from fastapi import FastAPI
import logging

from slideship.api.routes import router
from slideship.config import load_config
from slideship.session import PresentationSession

app = FastAPI(title="slideship", version="0.1.0")
app.include_router(router)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    config = load_config()
    logging.basicConfig(level=config.log_level)
    session = PresentationSession.from_config(config)
    await session.start()
    app.state.session = session


@app.on_event("shutdown")
async def _shutdown() -> None:
    session: PresentationSession | None = getattr(app.state, "session", None)
    if session is not None:
        await session.stop()
        logger.info("session %s stopped", session.session_id)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "slideship", "version": "0.1.0"}
