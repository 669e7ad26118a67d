"""TradeBoost — Google Ads Connector Errors."""


class GoogleAdsAPIError(Exception):
    """Raised when the Google Ads API returns an error or a malformed body."""

    def __init__(self, message: str, status_code: int = 0, error_code: str = ""):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class GoogleAdsAuthError(GoogleAdsAPIError):
    """Missing, expired or rejected Google credentials. Never retried."""
