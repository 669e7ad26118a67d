"""TradeBoost — Call-Tracking Webhook Routes."""

import json

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlmodel import Session

from tradeboost.config import settings
from tradeboost.database import get_session
from tradeboost.core.errors import CallPayloadError
from tradeboost.tracking.call_recorder import record_call_event
from tradeboost.tracking.webhook_mapper import map_provider_payload, verify_signature
from tradeboost.core.logging import get_logger

logger = get_logger("api.calls")

router = APIRouter(prefix="/call-tracking", tags=["Call Tracking"])


async def _read_payload(request: Request) -> dict:
    """Twilio posts form-encoded bodies; other providers send JSON."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)
    try:
        payload = json.loads(await request.body() or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Payload must be an object")
    return payload


@router.post("/webhook")
async def call_tracking_webhook(
    request: Request,
    x_provider: str = Header("twilio"),
    x_signature: str | None = Header(None),
    session: Session = Depends(get_session),
):
    """Record an inbound call event. Redeliveries are acknowledged as no-ops."""
    provider = x_provider.strip().lower() or "twilio"

    if settings.call_webhook_secret:
        body = await request.body()
        if not verify_signature(body, x_signature, settings.call_webhook_secret):
            logger.warning("Rejected webhook with bad signature", extra={"provider": provider})
            raise HTTPException(status_code=401, detail="Invalid signature")

    raw = await _read_payload(request)
    try:
        event = map_provider_payload(raw, provider)
    except CallPayloadError as e:
        logger.error(f"Rejected call payload: {e}", extra={"provider": provider})
        raise HTTPException(status_code=400, detail=str(e))

    call_id = record_call_event(session, event)
    return {"status": "success", "call_id": call_id}
