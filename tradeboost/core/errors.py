"""TradeBoost — Error Taxonomy.

Connector-specific errors (Google Ads auth / API) live next to the connector;
these are the domain-level failures raised by the core services.
"""


class TradeBoostError(Exception):
    """Base class for all TradeBoost domain errors."""


class ConfigurationError(TradeBoostError):
    """Raised for invalid configuration, e.g. an unknown IANA timezone."""


class NotAuthenticatedError(TradeBoostError):
    """Raised when an operation is attempted without a user context."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class SnapshotValidationError(TradeBoostError):
    """Raised when a spend snapshot fails boundary validation."""


class SpendSyncError(TradeBoostError):
    """Raised when a spend sync attempt fails as a whole.

    ``days_synced`` reports how many daily snapshots were persisted
    before the failure.
    """

    def __init__(self, message: str, days_synced: int = 0):
        self.days_synced = days_synced
        super().__init__(message)


class CallPayloadError(TradeBoostError):
    """Raised when a call-tracking webhook payload cannot be normalized."""


class RecordNotFoundError(TradeBoostError):
    """Raised when a stored record does not exist for the requesting user."""
