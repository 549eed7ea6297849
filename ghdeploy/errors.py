"""Errors raised while correlating builds with GitHub deployments."""

from __future__ import annotations

from typing import Optional


class NotifierError(Exception):
    """Base class for notifier failures that are reported, never retried."""


class ResolutionNotFound(NotifierError):
    """No deployment matches the commit/environment pair."""

    def __init__(self, owner: str, repo: str, sha: str, environment: str):
        self.owner = owner
        self.repo = repo
        self.sha = sha
        self.environment = environment
        super().__init__(
            f"no deployment found: repo={owner}/{repo} sha={sha!r} "
            f"environment={environment!r}"
        )


class UpstreamError(NotifierError):
    """
    A remote API answered with a non-2xx status or could not be reached.

    ``status_code`` is ``None`` for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: str = "",
        url: str = "",
    ):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(message)


class PayloadError(NotifierError):
    """A request body could not be produced for an event."""
