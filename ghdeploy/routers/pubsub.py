"""Pub/Sub push endpoint for Cloud Build notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ghdeploy.db import get_db
from ghdeploy.events import BuildEvent
from ghdeploy.models import DeliveryLog
from ghdeploy.schemas import PubSubPushEnvelope
from ghdeploy.services.dispatcher import NotificationDispatcher, Outcome, OutcomeKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pubsub", tags=["cloudbuild"])

# Pub/Sub redelivers anything that is not acked with a 2xx.
REDELIVER_STATUS = {
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.UPSTREAM_ERROR: 502,
}

MAX_STORED_BODY = 4000


def get_dispatcher(request: Request) -> NotificationDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(503, "Dispatcher is not ready")
    return dispatcher


def _record(
    db: Session, message_id: str, event: BuildEvent, outcome: Outcome
) -> None:
    log = DeliveryLog(
        message_id=message_id,
        project_id=event.project_id,
        build_id=event.build_id,
        trigger_id=event.trigger_id,
        build_status=event.status.value,
        outcome=outcome.kind.value,
        reason=outcome.reason,
        target_url=outcome.url,
        status_code=outcome.status_code,
        deployment_id=outcome.deployment_id,
        response_body=(outcome.body or "")[:MAX_STORED_BODY],
        error_message=None if outcome.ok else outcome.reason,
    )
    db.add(log)
    db.commit()


@router.post("", response_class=PlainTextResponse)
async def cloudbuild_notification(
    envelope: PubSubPushEnvelope,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    db: Session = Depends(get_db),
):
    """
    Receive a Cloud Build ``Build`` resource wrapped in a Pub/Sub push message.

    The response code drives Pub/Sub redelivery: missing deployments and
    GitHub failures are nacked so the message comes back later, everything
    else is acked.
    """
    try:
        build = envelope.message.decode_json()
    except ValueError as exc:
        raise HTTPException(400, f"Invalid message data: {exc}") from exc
    if not isinstance(build, dict):
        raise HTTPException(400, "Message data is not a Build object")

    event = BuildEvent.from_build(build)
    outcome = await dispatcher.handle(event)
    _record(db, envelope.message.message_id, event, outcome)

    summary = f"{outcome.kind.value}: build {event.build_id} ({event.status.value})"
    if outcome.reason:
        summary += f" {outcome.reason}"

    status_code = REDELIVER_STATUS.get(outcome.kind)
    if status_code is not None:
        raise HTTPException(status_code, summary)
    return summary
