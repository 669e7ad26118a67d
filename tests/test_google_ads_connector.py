"""Google Ads REST client, OAuth refresh and report parsing."""

import json

import httpx
import pytest

from tradeboost.connectors.google_ads.client import GoogleAdsClient
from tradeboost.connectors.google_ads.errors import GoogleAdsAPIError, GoogleAdsAuthError
from tradeboost.connectors.google_ads.oauth import GoogleTokenRefresher
from tradeboost.connectors.google_ads.transformer import transform_report

STREAM_RESPONSE = [
    {
        "results": [
            {"segments": {"date": "2026-03-01"}, "metrics": {"costMicros": "1500000"}},
            {"segments": {"date": "2026-03-02"}, "metrics": {"costMicros": "0"}},
        ]
    },
    {"results": [{"segments": {"date": "2026-03-03"}, "metrics": {}}]},
]


def _client(handler, **kwargs) -> GoogleAdsClient:
    return GoogleAdsClient(
        access_token="access-1",
        customer_id="123-456-7890",
        developer_token="dev-token",
        login_customer_id="999-000-1111",
        retry_base_delay=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_transform_report_flattens_batches():
    rows = transform_report(STREAM_RESPONSE)
    assert [(r.date, r.cost_micros) for r in rows] == [
        ("2026-03-01", "1500000"),
        ("2026-03-02", "0"),
        ("2026-03-03", 0),
    ]


def test_transform_report_rejects_malformed_payload():
    with pytest.raises(GoogleAdsAPIError):
        transform_report("not a report")
    assert transform_report({"results": []}) == []


async def test_report_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=STREAM_RESPONSE)

    client = _client(handler)
    rows = await client.report("2026-03-01", "2026-03-15")
    await client.close()

    assert len(rows) == 3
    assert seen["url"].endswith("/customers/1234567890/googleAds:searchStream")
    assert seen["headers"]["authorization"] == "Bearer access-1"
    assert seen["headers"]["developer-token"] == "dev-token"
    assert seen["headers"]["login-customer-id"] == "9990001111"
    assert "segments.date BETWEEN '2026-03-01' AND '2026-03-15'" in seen["body"]["query"]
    assert "metrics.cost_micros" in seen["body"]["query"]


async def test_auth_failure_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(
            401, json={"error": {"message": "Invalid credentials", "status": "UNAUTHENTICATED"}}
        )

    client = _client(handler, max_attempts=3)
    with pytest.raises(GoogleAdsAuthError) as exc:
        await client.report("2026-03-01", "2026-03-15")

    assert len(calls) == 1
    assert exc.value.status_code == 401
    assert exc.value.error_code == "UNAUTHENTICATED"


async def test_server_errors_retry_up_to_max_attempts():
    responses = [httpx.Response(503, json={}), httpx.Response(200, json=STREAM_RESPONSE)]

    def handler(request):
        return responses.pop(0)

    rows = await _client(handler, max_attempts=2).report("2026-03-01", "2026-03-15")
    assert len(rows) == 3


async def test_single_attempt_by_default():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500, json=[{"error": {"message": "Internal error"}}])

    with pytest.raises(GoogleAdsAPIError, match="Internal error"):
        await _client(handler).report("2026-03-01", "2026-03-15")
    assert len(calls) == 1


async def test_transport_error_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(GoogleAdsAPIError, match="Connection to Google Ads failed"):
        await _client(handler).report("2026-03-01", "2026-03-15")


async def test_token_refresh_success():
    seen = {}

    def handler(request):
        seen["body"] = request.content.decode()
        return httpx.Response(200, json={"access_token": "new-token", "expires_in": 3600})

    refresher = GoogleTokenRefresher(
        client_id="cid", client_secret="secret", transport=httpx.MockTransport(handler)
    )
    grant = await refresher.refresh("refresh-1")

    assert grant.access_token == "new-token"
    assert grant.expires_at > 0
    assert "grant_type=refresh_token" in seen["body"]
    assert "refresh_token=refresh-1" in seen["body"]


async def test_token_refresh_rejected():
    def handler(request):
        return httpx.Response(
            400, json={"error": "invalid_grant", "error_description": "Token has been revoked"}
        )

    refresher = GoogleTokenRefresher(transport=httpx.MockTransport(handler))
    with pytest.raises(GoogleAdsAuthError, match="Token has been revoked"):
        await refresher.refresh("refresh-1")
