"""Shared builders and fakes for the test-suite."""

from __future__ import annotations

import json

import httpx

from ghdeploy.events import BuildEvent, BuildStatus, RepoCoordinates
from ghdeploy.services.github import GitHubClient

API = "https://api.github.test"
REPO = RepoCoordinates(owner="octo", name="app")
class FakeGitHub:
    """Records requests and answers like the Deployments API."""

    def __init__(self, deployments=None, list_status=200, post_status=201, post_body=None):
        self.deployments = deployments if deployments is not None else []
        self.list_status = list_status
        self.post_status = post_status
        self.post_body = post_body if post_body is not None else {"id": 42}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(self.list_status, json=self.deployments)
        return httpx.Response(self.post_status, json=self.post_body)

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


def make_client(handler) -> GitHubClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubClient(http, "s3cret", api_url=API, user_agent="GCB-Notifier/0.1 (http)")


def make_event(status=BuildStatus.SUCCESS, **kwargs) -> BuildEvent:
    defaults = dict(
        project_id="my-project",
        build_id="build-1",
        status=status,
        trigger_id="trig-1",
        log_url="https://console.cloud.google.com/cloud-build/builds/build-1?project=42",
        substitutions={
            "COMMIT_SHA": "abc123",
            "REF_NAME": "main",
            "_ENVIRONMENT": "prod",
            "_ENVIRONMENT_URL": "https://app.example.com",
        },
    )
    defaults.update(kwargs)
    return BuildEvent(**defaults)


