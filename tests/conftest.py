from __future__ import annotations

import os

os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("GITHUB_TOKEN", "test-token")

import pytest

from ghdeploy.services.github import GitHubClient
from ghdeploy.services.triggers import StaticTriggerLookup
from helpers import REPO, FakeGitHub, make_client


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def github(fake_github) -> GitHubClient:
    return make_client(fake_github)


@pytest.fixture
def triggers() -> StaticTriggerLookup:
    return StaticTriggerLookup({"trig-1": REPO})
