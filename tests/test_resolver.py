import httpx
import pytest

from ghdeploy.errors import ResolutionNotFound, UpstreamError
from ghdeploy.services.resolver import DeploymentResolver, pick_latest
from helpers import REPO, FakeGitHub, make_client


def test_pick_latest_uses_max_id():
    assert pick_latest([{"id": 3}, {"id": 7}, {"id": 5}]) == 7


def test_pick_latest_ignores_items_without_integer_id():
    assert pick_latest([{"id": "9"}, {"url": "x"}, {"id": True}]) is None
    assert pick_latest([{"id": "9"}, {"id": 4}]) == 4


@pytest.mark.asyncio
async def test_resolve_selects_newest_deployment():
    fake = FakeGitHub(deployments=[{"id": 3}, {"id": 7}, {"id": 5}])
    resolution = await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "prod")
    assert resolution.deployment_id == 7
    assert resolution.candidates == 3

    (request,) = fake.requests
    assert request.url.path == "/repos/octo/app/deployments"
    assert request.url.params["sha"] == "abc123"
    assert request.url.params["environment"] == "prod"


@pytest.mark.asyncio
async def test_resolve_empty_list_is_not_found():
    fake = FakeGitHub(deployments=[])
    with pytest.raises(ResolutionNotFound) as excinfo:
        await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "prod")
    assert excinfo.value.sha == "abc123"
    assert excinfo.value.environment == "prod"


@pytest.mark.asyncio
async def test_resolve_without_environment_filters_by_sha_only():
    fake = FakeGitHub(deployments=[{"id": 1}])
    await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "")
    assert "environment" not in fake.requests[0].url.params


@pytest.mark.asyncio
async def test_resolve_non_2xx_is_upstream_error():
    fake = FakeGitHub(list_status=500, deployments={"message": "boom"})
    with pytest.raises(UpstreamError) as excinfo:
        await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "prod")
    assert excinfo.value.status_code == 500
    assert "boom" in excinfo.value.body


@pytest.mark.asyncio
async def test_resolve_transport_failure_is_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        await DeploymentResolver(make_client(handler)).resolve(REPO, "abc123", "prod")
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_resolve_non_array_response_is_upstream_error():
    fake = FakeGitHub(deployments={"id": 1})
    with pytest.raises(UpstreamError):
        await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "prod")


@pytest.mark.asyncio
async def test_resolve_counts_only_usable_candidates():
    fake = FakeGitHub(deployments=[{"id": "9"}, {"url": "x"}, {"id": 4}])
    resolution = await DeploymentResolver(make_client(fake)).resolve(REPO, "abc123", "prod")
    assert resolution.deployment_id == 4
    assert resolution.candidates == 1
