"""
Unit tests for the Deployment admission endpoint.

Uses ``aiohttp.test_utils`` to drive the webhook's aiohttp application
with a mocked resource store behind the mutation service.
"""

import base64
import json
import logging
from unittest.mock import MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from config_version_webhook.observability.logging import HealthProbeFilter
from config_version_webhook.services.mutation_service import MutationService
from config_version_webhook.webhooks.codec import AdmissionCodec
from config_version_webhook.webhooks.deployment import (
    DeploymentWebhook,
    create_webhook_app,
)
from tests.fixtures.deployment_resources import (
    config_map_volume,
    make_admission_review,
    make_deployment,
)


@pytest.fixture
def webhook(store):
    return DeploymentWebhook(MutationService(store), AdmissionCodec())


@pytest.fixture
async def client(webhook):
    server = TestServer(create_webhook_app(webhook, "/mutate"))
    async with TestClient(server) as cli:
        yield cli


async def _post_review(client, review):
    resp = await client.post("/mutate", data=json.dumps(review))
    assert resp.status == 200
    return (await resp.json())["response"]


class TestMutateEndpoint:
    """Tests for ``POST /mutate``."""

    @pytest.mark.asyncio
    async def test_allows_with_patch(self, client, store):
        store.add("configmap", "app-cfg", version="v3")
        review = make_admission_review(
            make_deployment(volumes=[config_map_volume("app-cfg")]), uid="uid-42"
        )

        response = await _post_review(client, review)

        assert response["uid"] == "uid-42"
        assert response["allowed"] is True
        assert response["patchType"] == "JSONPatch"
        assert json.loads(base64.b64decode(response["patch"])) == [
            {
                "op": "add",
                "path": "/spec/template/metadata/annotations",
                "value": {"ccm-app-cfg": "v3"},
            }
        ]

    @pytest.mark.asyncio
    async def test_store_failure_reports_status(self, client, store):
        review = make_admission_review(
            make_deployment(volumes=[config_map_volume("missing")]), uid="uid-7"
        )

        response = await _post_review(client, review)

        assert response["uid"] == "uid-7"
        assert response["allowed"] is False
        assert "patch" not in response
        assert "missing" in response["status"]["message"]
        assert "HTTP 404" in response["status"]["message"]

    @pytest.mark.asyncio
    async def test_undecodable_deployment_reports_status(self, client):
        raw = make_deployment()
        raw["spec"]["template"]["spec"]["volumes"] = 7
        response = await _post_review(client, make_admission_review(raw, uid="u"))

        assert response["uid"] == "u"
        assert response["allowed"] is False
        assert "Could not unmarshal" in response["status"]["message"]

    @pytest.mark.asyncio
    async def test_undecodable_body_reports_status(self, client):
        resp = await client.post("/mutate", data=b"garbage")

        assert resp.status == 200
        response = (await resp.json())["response"]
        assert response["allowed"] is False
        assert "Can't decode body" in response["status"]["message"]

    @pytest.mark.asyncio
    async def test_empty_body_is_bad_request(self, client):
        resp = await client.post("/mutate", data=b"")

        assert resp.status == 400
        assert await resp.text() == "empty body"

    @pytest.mark.asyncio
    async def test_unexpected_error_reports_status(self, store):
        mutation_service = MagicMock()
        mutation_service.mutate.side_effect = RuntimeError("kaboom")
        webhook = DeploymentWebhook(mutation_service, AdmissionCodec())
        server = TestServer(create_webhook_app(webhook, "/mutate"))

        async with TestClient(server) as cli:
            response = await _post_review(
                cli, make_admission_review(make_deployment(), uid="uid-9")
            )

        assert response["uid"] == "uid-9"
        assert response["allowed"] is False
        assert "RuntimeError: kaboom" in response["status"]["message"]

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, client):
        resp = await client.get("/mutate")

        assert resp.status == 405


class TestRequestLogging:
    """Log lines written while handling a review."""

    @pytest.mark.asyncio
    async def test_request_line_carries_username(self, client, store, caplog):
        store.add("configmap", "app-cfg", version="v3")
        review = make_admission_review(
            make_deployment(volumes=[config_map_volume("app-cfg")]), uid="uid-11"
        )

        with caplog.at_level(logging.INFO, logger="config_version_webhook"):
            await _post_review(client, review)

        (record,) = [r for r in caplog.records if "AdmissionReview for" in r.getMessage()]
        assert "User=admin" in record.getMessage()
        assert record.username == "admin"

    @pytest.mark.asyncio
    async def test_patch_line_mentioning_metrics_path_is_kept(self, client, store, caplog):
        store.add("configmap", "app-cfg", version="v3")
        review = make_admission_review(
            make_deployment(
                annotations={"prometheus.io/path": "/metrics"},
                volumes=[config_map_volume("app-cfg")],
            ),
            uid="uid-12",
        )

        with caplog.at_level(logging.INFO, logger="config_version_webhook"):
            await _post_review(client, review)

        (record,) = [
            r for r in caplog.records if r.getMessage().startswith("AdmissionResponse: patch=")
        ]
        assert "/metrics" in record.getMessage()
        assert HealthProbeFilter().filter(record)
