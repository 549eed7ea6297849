"""the beautiful world start from here."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    github_token: str = os.getenv("GITHUB_TOKEN", "")
    github_api_url: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    github_user_agent: str = os.getenv("GITHUB_USER_AGENT", "GCB-Notifier/0.1 (http)")
    # Build status that opens a new GitHub Deployment; every later status
    # is posted as a deployment status on the resolved deployment.
    initial_status: str = os.getenv("INITIAL_STATUS", "PENDING")
    filter_statuses: str = os.getenv("FILTER_STATUSES", "*")
    filter_trigger_ids: str = os.getenv("FILTER_TRIGGER_IDS", "*")
    trigger_repos: str = os.getenv("TRIGGER_REPOS", "")
    cloudbuild_api_url: str = os.getenv(
        "CLOUDBUILD_API_URL", "https://cloudbuild.googleapis.com/v1"
    )
    cloudbuild_access_token: str = os.getenv("CLOUDBUILD_ACCESS_TOKEN", "")
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
    db_url: str = os.getenv("DB_URL", "sqlite:///./ghdeploy.sqlite3")
    admin_http_key: str = os.getenv("ADMIN_HTTP_KEY", "")
    timezone: str = os.getenv("TIMEZONE", "UTC")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
