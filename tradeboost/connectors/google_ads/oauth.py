"""TradeBoost — Google OAuth Token Refresh.

One-shot refresh-token grant against Google's token endpoint. A failed
refresh is fatal to the sync attempt that needed it.
"""

from typing import Optional

import httpx
from pydantic import BaseModel

from tradeboost.config import settings
from tradeboost.connectors.google_ads.errors import GoogleAdsAuthError
from tradeboost.core.periods import now_ms
from tradeboost.core.logging import get_logger

logger = get_logger("google_ads.oauth")


class TokenGrant(BaseModel):
    access_token: str
    expires_at: int  # epoch ms


class GoogleTokenRefresher:
    """Exchanges a refresh token for a new access token."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_url: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id or settings.google_ads_client_id
        self.client_secret = client_secret or settings.google_ads_client_secret
        self.token_url = token_url or settings.google_oauth_token_url
        self._transport = transport

    async def refresh(self, refresh_token: str) -> TokenGrant:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            async with httpx.AsyncClient(timeout=15.0, transport=self._transport) as client:
                resp = await client.post(self.token_url, data=data)
            body = resp.json()
        except (httpx.RequestError, ValueError) as e:
            raise GoogleAdsAuthError(f"Token refresh failed: {e}") from e

        if not isinstance(body, dict):
            raise GoogleAdsAuthError("Token refresh failed: malformed response")
        if body.get("error") or resp.status_code >= 400:
            detail = body.get("error_description") or body.get("error") or resp.status_code
            raise GoogleAdsAuthError(
                f"Token refresh failed: {detail}", status_code=resp.status_code
            )

        try:
            grant = TokenGrant(
                access_token=body["access_token"],
                expires_at=now_ms() + int(body.get("expires_in", 3600)) * 1000,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise GoogleAdsAuthError("Token refresh failed: malformed response") from e

        logger.info("Refreshed Google Ads access token")
        return grant
