"""TradeBoost — Google Ads API Client.

Handles authentication headers, optional bounded retry with jitter, and the
daily cost report used by the spend sync.
"""

import asyncio
import random
from typing import Any, Dict, List, Optional

import httpx

from tradeboost.config import settings
from tradeboost.connectors.google_ads.errors import GoogleAdsAPIError, GoogleAdsAuthError
from tradeboost.connectors.google_ads.transformer import DailyCostRow, transform_report
from tradeboost.core.logging import get_logger

logger = get_logger("google_ads.client")

DAILY_COST_QUERY = (
    "SELECT segments.date, metrics.cost_micros FROM customer "
    "WHERE segments.date BETWEEN '{date_from}' AND '{date_to}'"
)


def _clean_customer_id(customer_id: str) -> str:
    return customer_id.replace("-", "").strip()


def _error_details(resp: httpx.Response) -> tuple[str, str]:
    """Pull (message, status) out of a Google API error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or f"HTTP {resp.status_code}", ""
    if isinstance(body, list) and body:
        body = body[0]
    error = body.get("error", {}) if isinstance(body, dict) else {}
    return error.get("message", f"HTTP {resp.status_code}"), error.get("status", "")


class GoogleAdsClient:
    """Async HTTP client for the Google Ads REST API."""

    def __init__(
        self,
        access_token: str,
        customer_id: str | None = None,
        developer_token: str | None = None,
        login_customer_id: str | None = None,
        max_attempts: int | None = None,
        retry_base_delay: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.customer_id = _clean_customer_id(
            customer_id or settings.google_ads_login_customer_id
        )
        self.developer_token = developer_token or settings.google_ads_developer_token
        self.login_customer_id = _clean_customer_id(
            login_customer_id or settings.google_ads_login_customer_id
        )
        self.max_attempts = max(1, max_attempts or settings.google_ads_max_attempts)
        self.retry_base_delay = (
            settings.google_ads_retry_base_delay if retry_base_delay is None else retry_base_delay
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return f"{settings.google_ads_base_url}/{settings.google_ads_api_version}"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "developer-token": self.developer_token,
        }
        if self.login_customer_id:
            headers["login-customer-id"] = self.login_customer_id
        return headers

    def _backoff(self, attempt: int) -> float:
        delay = self.retry_base_delay * (2 ** (attempt - 1))
        return delay + random.uniform(0, self.retry_base_delay)

    # ── Core Request Method ──

    async def _request(self, method: str, url: str, json: Dict[str, Any]) -> Any:
        """Make a request; retry 429/5xx/transport errors up to ``max_attempts``."""
        client = await self._get_client()

        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = await client.request(method, url, json=json, headers=self._headers())
            except httpx.RequestError as e:
                if attempt < self.max_attempts:
                    wait = self._backoff(attempt)
                    logger.warning(f"Request error: {e}. Retrying in {wait:.1f}s")
                    await asyncio.sleep(wait)
                    continue
                raise GoogleAdsAPIError(f"Connection to Google Ads failed: {e}") from e

            if resp.status_code in (401, 403):
                message, status = _error_details(resp)
                raise GoogleAdsAuthError(message, resp.status_code, status)

            if resp.status_code == 429 or resp.status_code >= 500:
                if attempt < self.max_attempts:
                    wait = self._backoff(attempt)
                    logger.warning(
                        f"Google Ads returned {resp.status_code}. Retrying in {wait:.1f}s "
                        f"(attempt {attempt}/{self.max_attempts})"
                    )
                    await asyncio.sleep(wait)
                    continue

            if resp.status_code >= 400:
                message, status = _error_details(resp)
                raise GoogleAdsAPIError(message, resp.status_code, status)

            try:
                return resp.json()
            except ValueError as e:
                raise GoogleAdsAPIError("Malformed JSON from Google Ads", resp.status_code) from e

        raise GoogleAdsAPIError("Max retries exhausted")

    # ── Reports ──

    async def report(self, date_from: str, date_to: str) -> List[DailyCostRow]:
        """Daily cost for the account over [date_from, date_to], inclusive."""
        if not self.customer_id:
            raise GoogleAdsAuthError("No Google Ads customer id configured")
        url = f"{self.base_url}/customers/{self.customer_id}/googleAds:searchStream"
        query = DAILY_COST_QUERY.format(date_from=date_from, date_to=date_to)
        payload = await self._request("POST", url, {"query": query})
        return transform_report(payload)
