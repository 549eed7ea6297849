"""Cloud Build event snapshots and the values derived from them."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ghdeploy.errors import PayloadError

COMMIT_SHA_KEY = "COMMIT_SHA"
REF_NAME_KEY = "REF_NAME"
ENVIRONMENT_KEY = "_ENVIRONMENT"
ENVIRONMENT_URL_KEY = "_ENVIRONMENT_URL"

UTM_CAMPAIGN = "google-cloud-build-notifiers"
UTM_SOURCE = "google-cloud-build"
HTTP_MEDIUM = "http"


class BuildStatus(str, Enum):
    """Cloud Build ``Build.Status`` values."""

    STATUS_UNKNOWN = "STATUS_UNKNOWN"
    QUEUED = "QUEUED"
    PENDING = "PENDING"
    WORKING = "WORKING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"

    @classmethod
    def parse(cls, value: Any) -> "BuildStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            return cls.STATUS_UNKNOWN


@dataclass(frozen=True)
class RepoCoordinates:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class BuildEvent:
    """
    Point-in-time snapshot of a Cloud Build build.

    Instances never change; derived values (such as the tracked log URL)
    are produced as new events.
    """

    project_id: str
    build_id: str
    status: BuildStatus
    trigger_id: str = ""
    log_url: str = ""
    substitutions: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        subs = {str(k): str(v) for k, v in (self.substitutions or {}).items()}
        object.__setattr__(self, "substitutions", MappingProxyType(subs))

    def substitution(self, key: str) -> str:
        """Return a substitution value, or ``""`` when the key is missing."""
        return self.substitutions.get(key, "")

    @property
    def commit_sha(self) -> str:
        return self.substitution(COMMIT_SHA_KEY)

    @property
    def ref_name(self) -> str:
        return self.substitution(REF_NAME_KEY)

    @property
    def environment(self) -> str:
        return self.substitution(ENVIRONMENT_KEY)

    @property
    def environment_url(self) -> str:
        return self.substitution(ENVIRONMENT_URL_KEY)

    @classmethod
    def from_build(cls, data: Mapping[str, Any]) -> "BuildEvent":
        """Build an event from a Cloud Build ``Build`` resource (JSON form)."""
        substitutions = data.get("substitutions") or {}
        if not isinstance(substitutions, Mapping):
            substitutions = {}
        return cls(
            project_id=str(data.get("projectId") or ""),
            build_id=str(data.get("id") or ""),
            status=BuildStatus.parse(data.get("status")),
            trigger_id=str(data.get("buildTriggerId") or ""),
            log_url=str(data.get("logUrl") or ""),
            substitutions=substitutions,
        )


def add_utm_params(url: str, medium: str = HTTP_MEDIUM) -> str:
    """
    Return ``url`` with the notifier's UTM tracking parameters set.

    Existing query parameters are kept; the three ``utm_*`` keys are
    overwritten.
    """
    if not medium:
        raise PayloadError("empty UTM medium")
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise PayloadError(f"invalid log URL {url!r}: {exc}") from exc

    query = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k not in ("utm_campaign", "utm_medium", "utm_source")
    ]
    query += [
        ("utm_campaign", UTM_CAMPAIGN),
        ("utm_medium", medium),
        ("utm_source", UTM_SOURCE),
    ]
    return urlunsplit(parts._replace(query=urlencode(sorted(query))))


def with_tracking_params(event: BuildEvent, medium: str = HTTP_MEDIUM) -> BuildEvent:
    """Return a copy of ``event`` whose log URL carries tracking parameters."""
    if not event.log_url:
        return event
    return dataclasses.replace(event, log_url=add_utm_params(event.log_url, medium))
