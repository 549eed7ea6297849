"""Ruter Ingfo?"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ghdeploy.config import settings

router = APIRouter()


def render_help_text() -> str:
    return dedent(
        f"""
    Cloud Build → GitHub Deployments notifier

    Endpoints
    ---------
    - GET  /                  : Health check & this help
    - POST /pubsub            : Pub/Sub push endpoint (Cloud Build notifications)
    - GET  /stats/deliveries  : Recent deliveries (needs ADMIN_HTTP_KEY as ?key= when set)

    Behaviour
    ---------
    - Build status {settings.initial_status} creates a GitHub Deployment.
    - Later statuses are posted as deployment statuses on the newest
      deployment matching COMMIT_SHA and _ENVIRONMENT.

    Setup
    -----
    pip install -e .
    uvicorn ghdeploy.app:app --host 0.0.0.0 --port 8080 --proxy-headers --forwarded-allow-ips="*"
    """
    ).strip()


@router.get("/", response_class=PlainTextResponse)
def root():
    """Health check."""
    return render_help_text()
