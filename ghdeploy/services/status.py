"""Cloud Build status → GitHub deployment state."""

from __future__ import annotations

from typing import Optional

from ghdeploy.events import BuildStatus

DEPLOYMENT_STATES: dict[BuildStatus, str] = {
    BuildStatus.PENDING: "pending",
    BuildStatus.WORKING: "in_progress",
    BuildStatus.SUCCESS: "success",
    BuildStatus.FAILURE: "failure",
    BuildStatus.TIMEOUT: "error",
    BuildStatus.INTERNAL_ERROR: "error",
    BuildStatus.CANCELLED: "error",
    BuildStatus.EXPIRED: "error",
}


def map_status(status: BuildStatus) -> Optional[str]:
    """
    Return the GitHub deployment state for a build status.

    ``None`` means "send no status update"; GitHub rejects unknown states,
    so there is no fallback value.
    """
    return DEPLOYMENT_STATES.get(status)
