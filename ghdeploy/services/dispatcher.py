"""
Build-to-Deployment correlation.

For every build event the dispatcher decides between two GitHub calls:

- the initial build status creates a Deployment
  (``POST /repos/{owner}/{repo}/deployments``);
- every later status is posted as a Deployment Status on the newest
  deployment matching the build's commit and environment
  (``POST /repos/{owner}/{repo}/deployments/{id}/statuses``).

No state is kept between events; the target deployment is looked up again
for each update. Failures are returned as an :class:`Outcome` and never
retried here, redelivery belongs to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ghdeploy.config import settings
from ghdeploy.errors import PayloadError, ResolutionNotFound, UpstreamError
from ghdeploy.events import BuildEvent, BuildStatus, RepoCoordinates, with_tracking_params
from ghdeploy.services.github import GitHubClient, GitHubResponse
from ghdeploy.services.payloads import build_create_payload, build_update_payload
from ghdeploy.services.resolver import DeploymentResolver
from ghdeploy.services.status import map_status
from ghdeploy.services.triggers import TriggerLookup

logger = logging.getLogger(__name__)

EventPredicate = Callable[[BuildEvent], bool]


class OutcomeKind(str, Enum):
    SKIPPED = "skipped"
    CREATED = "created"
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "upstream_error"
    PAYLOAD_ERROR = "payload_error"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    reason: str = ""
    url: str = ""
    status_code: Optional[int] = None
    body: str = ""
    deployment_id: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.SKIPPED, OutcomeKind.CREATED, OutcomeKind.UPDATED)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.SKIPPED, reason=reason)

    @classmethod
    def from_error(cls, exc: Union[UpstreamError, ResolutionNotFound, PayloadError]) -> "Outcome":
        if isinstance(exc, ResolutionNotFound):
            return cls(OutcomeKind.NOT_FOUND, reason=str(exc))
        if isinstance(exc, UpstreamError):
            return cls(
                OutcomeKind.UPSTREAM_ERROR,
                reason=str(exc),
                url=exc.url,
                status_code=exc.status_code,
                body=exc.body,
            )
        return cls(OutcomeKind.PAYLOAD_ERROR, reason=str(exc))


def parse_initial_status(value: Union[str, BuildStatus]) -> BuildStatus:
    status = BuildStatus.parse(value)
    if status is BuildStatus.STATUS_UNKNOWN:
        raise ValueError(f"unknown initial build status: {value!r}")
    return status


def _deployment_id(resp: GitHubResponse) -> Optional[int]:
    try:
        data = resp.json()
    except ValueError:
        return None
    value = data.get("id") if isinstance(data, dict) else None
    return value if isinstance(value, int) else None


class NotificationDispatcher:
    def __init__(
        self,
        github: GitHubClient,
        triggers: TriggerLookup,
        *,
        event_filter: Optional[EventPredicate] = None,
        resolver: Optional[DeploymentResolver] = None,
        initial_status: Union[str, BuildStatus, None] = None,
    ):
        self.github = github
        self.triggers = triggers
        self.event_filter = event_filter
        self.resolver = resolver or DeploymentResolver(github)
        self.initial_status = parse_initial_status(
            initial_status if initial_status is not None else settings.initial_status
        )

    async def handle(self, event: BuildEvent) -> Outcome:
        if self.event_filter is not None and not self.event_filter(event):
            logger.debug(
                "not sending response for event (build id = %s, status = %s)",
                event.build_id,
                event.status.value,
            )
            return Outcome.skipped("filtered out")

        if not event.trigger_id:
            logger.warning(
                "build passes filter but does not have a trigger ID. Build id: %r, status: %s",
                event.build_id,
                event.status.value,
            )
            return Outcome.skipped("missing trigger id")

        try:
            repo = await self.triggers.lookup(event.project_id, event.trigger_id)
        except UpstreamError as exc:
            logger.warning("failed to get build trigger %s: %s", event.trigger_id, exc)
            return Outcome.from_error(exc)
        if repo is None:
            logger.info(
                "skipped build %s: trigger %s has no GitHub connection",
                event.build_id,
                event.trigger_id,
            )
            return Outcome.skipped("trigger without github connection")

        try:
            if event.status is self.initial_status:
                return await self._create(repo, event)
            return await self._update(repo, event)
        except (ResolutionNotFound, UpstreamError) as exc:
            logger.warning("build %s (%s): %s", event.build_id, event.status.value, exc)
            return Outcome.from_error(exc)
        except PayloadError as exc:
            logger.error("build %s (%s): %s", event.build_id, event.status.value, exc)
            return Outcome.from_error(exc)

    async def _create(self, repo: RepoCoordinates, event: BuildEvent) -> Outcome:
        event = with_tracking_params(event)
        body = build_create_payload(event)
        logger.info(
            "creating GitHub deployment for build %s (status: %s) in %s",
            event.build_id,
            event.status.value,
            repo.full_name,
        )
        resp = await self.github.create_deployment(repo, body)
        return self._classify(resp, OutcomeKind.CREATED, _deployment_id(resp))

    async def _update(self, repo: RepoCoordinates, event: BuildEvent) -> Outcome:
        state = map_status(event.status)
        if state is None:
            logger.debug(
                "no deployment state for build %s status %s",
                event.build_id,
                event.status.value,
            )
            return Outcome.skipped(f"unmapped status {event.status.value}")

        resolution = await self.resolver.resolve(repo, event.commit_sha, event.environment)
        event = with_tracking_params(event)
        body = build_update_payload(event, state)
        logger.info(
            "posting deployment status %r for build %s to deployment %d in %s",
            state,
            event.build_id,
            resolution.deployment_id,
            repo.full_name,
        )
        resp = await self.github.create_deployment_status(
            repo, resolution.deployment_id, body
        )
        return self._classify(resp, OutcomeKind.UPDATED, resolution.deployment_id)

    @staticmethod
    def _classify(
        resp: GitHubResponse, kind: OutcomeKind, deployment_id: Optional[int]
    ) -> Outcome:
        if not resp.ok:
            logger.warning(
                "got a non-OK response status %d from %s", resp.status_code, resp.url
            )
            return Outcome(
                OutcomeKind.UPSTREAM_ERROR,
                reason=f"GitHub responded {resp.status_code}",
                url=resp.url,
                status_code=resp.status_code,
                body=resp.body,
                deployment_id=deployment_id if kind is OutcomeKind.UPDATED else None,
            )
        return Outcome(
            kind,
            url=resp.url,
            status_code=resp.status_code,
            body=resp.body,
            deployment_id=deployment_id,
        )
