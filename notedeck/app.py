from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRouter
from loguru import logger

from notedeck.deck import NoteDeck
from notedeck.log import setup_logging
from notedeck.settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)

    logger.info("notedeck starting (host={}, port={})", settings.host, settings.port)
    logger.info("Vault: {} (data={}, max_slots={})", settings.vault_path, settings.data_path, settings.max_slots)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.deck = None
    _app.state.watcher = None

    deck = NoteDeck(settings)
    await deck.start()
    _app.state.deck = deck

    # -- File watcher ----------------------------------------------------------
    if settings.watch:
        watcher = deck.create_watcher()
        watcher.start()
        _app.state.watcher = watcher
    else:
        logger.warning("NOTEDECK_WATCH is off -- external renames and deletes are not tracked")

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("notedeck shutting down")

    # Stop feeding events before the final save.
    if _app.state.watcher is not None:
        _app.state.watcher.stop()

    await deck.stop()
    logger.info("Data saved")


app = FastAPI(title="notedeck", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# -- Routers -----------------------------------------------------------------
from notedeck.routers.data import router as data_router  # noqa: E402
from notedeck.routers.slots import router as slots_router  # noqa: E402
from notedeck.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(slots_router)
api.include_router(data_router)

app.include_router(api)
