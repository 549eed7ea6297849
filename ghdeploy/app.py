"""the beautiful world start from here."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from ghdeploy.config import settings
from ghdeploy.db import Base, engine
from ghdeploy.routers import info, pubsub, stats
from ghdeploy.services.dispatcher import NotificationDispatcher
from ghdeploy.services.filters import EventFilter
from ghdeploy.services.github import GitHubClient
from ghdeploy.services.triggers import build_trigger_lookup

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

Base.metadata.create_all(engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pooled client shared by every event.
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http:
        if not settings.github_token:
            logger.warning("GITHUB_TOKEN is empty; GitHub will reject requests")
        github = GitHubClient(http, settings.github_token)
        app.state.dispatcher = NotificationDispatcher(
            github,
            build_trigger_lookup(http),
            event_filter=EventFilter.from_settings(),
            initial_status=settings.initial_status,
        )
        logger.info("dispatcher ready (initial status: %s)", settings.initial_status)
        yield
        app.state.dispatcher = None


app = FastAPI(title="Cloud Build → GitHub Deployments", lifespan=lifespan)

app.include_router(info.router)
app.include_router(pubsub.router)
app.include_router(stats.router)
