"""TradeBoost — Call-Tracking Webhook Mapper.

Normalizes provider webhook payloads (Twilio, CallRail, generic JSON) into
``CallEventIn``.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError

from tradeboost.core.errors import CallPayloadError
from tradeboost.core.periods import now_ms, to_epoch_ms
from tradeboost.models.call_models import CallEventIn

TWILIO_ANSWERED_STATUSES = {"completed", "in-progress"}


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-empty value among ``keys``."""
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _parse_timestamp(value: Any) -> Optional[int]:
    """Parse epoch ms, ISO-8601 or RFC-2822 (Twilio) timestamps to epoch ms.

    Unrecognized strings yield None; numbers that are not finite, or digit
    strings too long to convert, raise ``CallPayloadError``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    text = str(value).strip()
    if isinstance(value, (int, float)) or (text.isascii() and text.isdigit()):
        try:
            return int(value) if isinstance(value, (int, float)) else int(text)
        except (OverflowError, ValueError):
            raise CallPayloadError(f"Invalid call timestamp: {value!r}")
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            moment = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return to_epoch_ms(moment)


def _parse_duration(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise CallPayloadError(f"Invalid call duration: {value!r}")


def _parse_answered(raw: Dict[str, Any]) -> bool:
    answered = raw.get("answered")
    if isinstance(answered, bool):
        return answered
    if isinstance(answered, str):
        return answered.strip().lower() in ("true", "1", "yes")
    status = str(_first(raw, "CallStatus", "status", "call_status") or "").lower()
    return status in TWILIO_ANSWERED_STATUSES or status == "answered"


def map_provider_payload(raw: Dict[str, Any], provider: str) -> CallEventIn:
    """Map a provider-specific payload to a normalized call event.

    Raises ``CallPayloadError`` when the user or external call id cannot be
    determined, or when the result fails validation.
    """
    metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
    user_id = _first(raw, "userId", "user_id") or metadata.get("userId")
    external_call_id = _first(raw, "CallSid", "call_id", "id", "externalCallId")

    if not user_id or not external_call_id:
        raise CallPayloadError("Missing required fields: userId and call id")

    started_at = _parse_timestamp(
        _first(raw, "Timestamp", "startedAt", "start_time", "timestamp")
    )

    try:
        return CallEventIn(
            user_id=str(user_id),
            provider=provider,
            external_call_id=str(external_call_id),
            from_number=_first(raw, "From", "from", "fromNumber", "customer_phone_number"),
            to_number=_first(raw, "To", "to", "toNumber", "business_phone_number"),
            tracking_number=_first(raw, "trackingNumber", "tracking_phone_number", "To"),
            started_at=started_at if started_at is not None else now_ms(),
            duration_seconds=_parse_duration(
                _first(raw, "CallDuration", "Duration", "duration", "durationSeconds")
            ),
            answered=_parse_answered(raw),
        )
    except ValidationError as e:
        raise CallPayloadError(f"Invalid call event: {e}") from e


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Check an HMAC-SHA256 hex signature of the raw request body."""
    if not signature:
        return False
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature.strip().lower())
