"""Resolve Cloud Build triggers to the GitHub repository they build."""

from __future__ import annotations

import logging
import time
from typing import Mapping, Optional

import httpx

from ghdeploy.config import settings
from ghdeploy.errors import UpstreamError
from ghdeploy.events import RepoCoordinates

logger = logging.getLogger(__name__)

METADATA_TOKEN_URL = (
    "http://metadata.google.internal/computeMetadata/v1/"
    "instance/service-accounts/default/token"
)
# Refresh metadata tokens this long before they expire.
TOKEN_EXPIRY_MARGIN_SECONDS = 60


def parse_trigger_repos(value: str) -> dict[str, RepoCoordinates]:
    """
    Parse ``"trigger-a=owner/repo,trigger-b=owner/other"``.

    Malformed entries are ignored.
    """
    out: dict[str, RepoCoordinates] = {}
    for item in (value or "").split(","):
        trigger_id, sep, full_name = item.strip().partition("=")
        owner, slash, name = full_name.strip().partition("/")
        if not sep or not slash or not trigger_id.strip() or not owner or not name:
            continue
        out[trigger_id.strip()] = RepoCoordinates(owner=owner, name=name)
    return out


class TriggerLookup:
    """Returns the GitHub repo of a trigger, or ``None`` when it has no GitHub connection."""

    async def lookup(self, project_id: str, trigger_id: str) -> Optional[RepoCoordinates]:
        raise NotImplementedError


class StaticTriggerLookup(TriggerLookup):
    def __init__(self, repos: Mapping[str, RepoCoordinates]):
        self._repos = dict(repos)

    async def lookup(self, project_id: str, trigger_id: str) -> Optional[RepoCoordinates]:
        return self._repos.get(trigger_id)


def _json_object(r: httpx.Response, url: str, what: str) -> dict:
    try:
        data = r.json()
    except ValueError as exc:
        raise UpstreamError(
            f"failed to decode {what} response: {exc}",
            status_code=r.status_code,
            body=r.text,
            url=url,
        ) from exc
    if not isinstance(data, dict):
        raise UpstreamError(
            f"{what} response is not a JSON object",
            status_code=r.status_code,
            body=r.text,
            url=url,
        )
    return data


class CloudBuildTriggerLookup(TriggerLookup):
    """Reads ``projects.triggers.get`` from the Cloud Build REST API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_url: Optional[str] = None,
        access_token: Optional[str] = None,
    ):
        self._http = http
        self.api_url = (api_url or settings.cloudbuild_api_url).rstrip("/")
        self._access_token = access_token
        self._metadata_token = ""
        self._metadata_expires_at = 0.0

    async def _token(self) -> str:
        if self._access_token:
            return self._access_token
        if self._metadata_token and time.monotonic() < self._metadata_expires_at:
            return self._metadata_token
        try:
            r = await self._http.get(
                METADATA_TOKEN_URL, headers={"Metadata-Flavor": "Google"}
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"failed to fetch metadata access token: {exc}", url=METADATA_TOKEN_URL
            ) from exc
        if r.status_code >= 300:
            raise UpstreamError(
                "failed to fetch metadata access token",
                status_code=r.status_code,
                body=r.text,
                url=METADATA_TOKEN_URL,
            )
        data = _json_object(r, METADATA_TOKEN_URL, "metadata token")
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise UpstreamError(
                "metadata token response has no access_token",
                status_code=r.status_code,
                body=r.text,
                url=METADATA_TOKEN_URL,
            )
        try:
            expires_in = float(data.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        self._metadata_token = token
        self._metadata_expires_at = (
            time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        )
        return token

    async def lookup(self, project_id: str, trigger_id: str) -> Optional[RepoCoordinates]:
        url = f"{self.api_url}/projects/{project_id}/triggers/{trigger_id}"
        token = await self._token()
        try:
            r = await self._http.get(url, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as exc:
            raise UpstreamError(f"failed to get build trigger: {exc}", url=url) from exc
        if r.status_code >= 300:
            raise UpstreamError(
                f"failed to get build trigger info: status={r.status_code}",
                status_code=r.status_code,
                body=r.text,
                url=url,
            )
        github = _json_object(r, url, "build trigger").get("github") or {}
        if not isinstance(github, dict):
            raise UpstreamError(
                "build trigger github settings are not a JSON object",
                status_code=r.status_code,
                body=r.text,
                url=url,
            )
        owner = github.get("owner") or ""
        name = github.get("name") or ""
        if not isinstance(owner, str) or not isinstance(name, str) or not owner or not name:
            logger.debug("trigger %s has no GitHub connection settings", trigger_id)
            return None
        return RepoCoordinates(owner=owner, name=name)


def build_trigger_lookup(http: httpx.AsyncClient) -> TriggerLookup:
    """Static mapping when ``TRIGGER_REPOS`` is set, Cloud Build API otherwise."""
    repos = parse_trigger_repos(settings.trigger_repos)
    if repos:
        return StaticTriggerLookup(repos)
    return CloudBuildTriggerLookup(
        http, access_token=settings.cloudbuild_access_token or None
    )
