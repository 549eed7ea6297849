"""Find the deployment a build status update belongs to."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ghdeploy.errors import ResolutionNotFound
from ghdeploy.events import RepoCoordinates
from ghdeploy.services.github import GitHubClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    deployment_id: int
    candidates: int


def deployment_ids(deployments: list[dict]) -> list[int]:
    """Integer ids of the listed deployments; other items are ignored."""
    return [
        d["id"]
        for d in deployments
        if isinstance(d.get("id"), int) and not isinstance(d.get("id"), bool)
    ]


def pick_latest(deployments: list[dict]) -> int | None:
    """
    Return the highest deployment id, or ``None`` when there is none.

    GitHub assigns ids in increasing order, so the highest id is the most
    recently created deployment.
    """
    ids = deployment_ids(deployments)
    return max(ids) if ids else None


class DeploymentResolver:
    """
    Resolve ``(sha, environment)`` to a deployment id with a live query.

    Nothing is cached: the process may restart between a build's first and
    last notification.
    """

    def __init__(self, github: GitHubClient):
        self._github = github

    async def resolve(
        self, repo: RepoCoordinates, sha: str, environment: str
    ) -> Resolution:
        if not environment:
            logger.warning(
                "resolving deployment for %s@%s without an environment filter",
                repo.full_name,
                sha,
            )
        deployments = await self._github.list_deployments(repo, sha, environment)
        ids = deployment_ids(deployments)
        if not ids:
            raise ResolutionNotFound(repo.owner, repo.name, sha, environment)
        deployment_id = max(ids)
        if len(ids) > 1:
            logger.info(
                "%d deployments match %s@%s (%s), using newest id=%d",
                len(ids),
                repo.full_name,
                sha,
                environment,
                deployment_id,
            )
        return Resolution(deployment_id=deployment_id, candidates=len(ids))
