"""Request bodies for the GitHub Deployments API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from ghdeploy.errors import PayloadError
from ghdeploy.events import BuildEvent

# GitHub rejects deployment status descriptions longer than this.
STATUS_DESCRIPTION_LIMIT = 140


class DeploymentCreatePayload(BaseModel):
    """Body of ``POST /repos/{owner}/{repo}/deployments``."""

    ref: str
    environment: str
    description: str
    payload: dict[str, Any] = Field(default_factory=dict)
    # An explicit empty list stops GitHub from re-checking commit statuses
    # (409 on repositories with required checks).
    required_contexts: list[str] = Field(default_factory=list)
    auto_merge: bool = False


class DeploymentStatusPayload(BaseModel):
    """Body of ``POST /repos/{owner}/{repo}/deployments/{id}/statuses``."""

    environment: str
    state: str
    description: str
    log_url: str
    environment_url: str


def describe_build(event: BuildEvent, *, with_log_url: bool = False) -> str:
    text = f"Cloud Build {event.project_id} {event.build_id} status: {event.status.value}"
    if event.trigger_id:
        text += f"\nTrigger ID: {event.trigger_id}"
    if with_log_url and event.log_url:
        text += f"\nView Logs: {event.log_url}"
    return text


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def _encode(model: BaseModel) -> bytes:
    try:
        return model.model_dump_json().encode("utf-8")
    except (ValueError, TypeError) as exc:
        raise PayloadError(f"failed to encode {type(model).__name__}: {exc}") from exc


def build_create_payload(event: BuildEvent) -> bytes:
    try:
        body = DeploymentCreatePayload(
            ref=event.ref_name,
            environment=event.environment,
            description=describe_build(event, with_log_url=True),
        )
    except ValidationError as exc:
        raise PayloadError(f"invalid deployment payload: {exc}") from exc
    return _encode(body)


def build_update_payload(event: BuildEvent, deployment_state: Optional[str]) -> bytes:
    if not deployment_state:
        raise PayloadError(
            f"no deployment state for build {event.build_id} (status {event.status.value})"
        )
    try:
        body = DeploymentStatusPayload(
            environment=event.environment,
            state=deployment_state,
            description=_truncate(describe_build(event), STATUS_DESCRIPTION_LIMIT),
            log_url=event.log_url,
            environment_url=event.environment_url,
        )
    except ValidationError as exc:
        raise PayloadError(f"invalid deployment status payload: {exc}") from exc
    return _encode(body)
