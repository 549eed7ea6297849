"""GitHub Deployments REST client."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ghdeploy.config import settings
from ghdeploy.errors import UpstreamError
from ghdeploy.events import RepoCoordinates

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"
SUCCESS_CODES = frozenset({200, 201})

JSONDict = dict[str, Any]


@dataclass(frozen=True)
class GitHubResponse:
    status_code: int
    body: str
    url: str

    @property
    def ok(self) -> bool:
        return self.status_code in SUCCESS_CODES

    def json(self) -> Any:
        return json.loads(self.body)


class GitHubClient:
    """
    Thin wrapper around a shared ``httpx.AsyncClient``.

    The client holds no per-event state, so one instance serves every
    concurrent event.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str,
        *,
        api_url: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self._http = http
        self._token = token
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.user_agent = user_agent or settings.github_user_agent

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": GITHUB_ACCEPT,
            "Authorization": f"token {self._token}",
            "User-Agent": self.user_agent,
        }

    def deployments_url(self, repo: RepoCoordinates) -> str:
        return f"{self.api_url}/repos/{repo.owner}/{repo.name}/deployments"

    def statuses_url(self, repo: RepoCoordinates, deployment_id: int) -> str:
        return f"{self.deployments_url(repo)}/{deployment_id}/statuses"

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> GitHubResponse:
        headers = self._headers()
        if content is not None:
            headers["Content-Type"] = "application/json"
        try:
            resp = await self._http.request(
                method, url, params=params, content=content, headers=headers
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"failed to make HTTP request: {method} {url}: {exc}", url=url
            ) from exc
        return GitHubResponse(status_code=resp.status_code, body=resp.text, url=url)

    async def list_deployments(
        self, repo: RepoCoordinates, sha: str, environment: str = ""
    ) -> list[JSONDict]:
        """``GET .../deployments`` filtered by sha (and environment when given)."""
        params = {"sha": sha}
        if environment:
            params["environment"] = environment
        url = self.deployments_url(repo)
        resp = await self._send("GET", url, params=params)
        if not resp.ok:
            logger.warning(
                "got a non-OK response status %d from %s", resp.status_code, url
            )
            raise UpstreamError(
                f"failed to call list deployments api: status={resp.status_code}",
                status_code=resp.status_code,
                body=resp.body,
                url=url,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"failed to decode list deployments response: {exc}",
                status_code=resp.status_code,
                body=resp.body,
                url=url,
            ) from exc
        if not isinstance(data, list):
            raise UpstreamError(
                "list deployments response is not a JSON array",
                status_code=resp.status_code,
                body=resp.body,
                url=url,
            )
        return [d for d in data if isinstance(d, dict)]

    async def create_deployment(self, repo: RepoCoordinates, body: bytes) -> GitHubResponse:
        return await self._send("POST", self.deployments_url(repo), content=body)

    async def create_deployment_status(
        self, repo: RepoCoordinates, deployment_id: int, body: bytes
    ) -> GitHubResponse:
        return await self._send(
            "POST", self.statuses_url(repo, deployment_id), content=body
        )
