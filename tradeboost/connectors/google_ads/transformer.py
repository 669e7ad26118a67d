"""TradeBoost — Google Ads Report → Daily Cost Rows.

Flattens ``googleAds:searchStream`` batches into one row per day. Rows keep
whatever cost value the API sent (usually a string of micros); validation is
left to the snapshot store so a bad row can be skipped on its own.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from tradeboost.connectors.google_ads.errors import GoogleAdsAPIError
from tradeboost.core.logging import get_logger

logger = get_logger("google_ads.transformer")


class DailyCostRow(BaseModel):
    date: Optional[str] = None
    cost_micros: Any = 0


def _extract_row(result: Dict[str, Any]) -> DailyCostRow:
    segments = result.get("segments") or {}
    metrics = result.get("metrics") or {}
    cost = metrics.get("costMicros", metrics.get("cost_micros", 0))
    return DailyCostRow(date=segments.get("date"), cost_micros=cost if cost is not None else 0)


def transform_report(payload: Any) -> List[DailyCostRow]:
    """Turn a searchStream response (list of batches) into daily cost rows."""
    if isinstance(payload, dict):
        # search (non-stream) returns a single page
        payload = [payload]
    if not isinstance(payload, list):
        raise GoogleAdsAPIError("Malformed report response: expected a list of batches")

    rows: List[DailyCostRow] = []
    for batch in payload:
        if not isinstance(batch, dict):
            raise GoogleAdsAPIError("Malformed report response: batch is not an object")
        for result in batch.get("results") or []:
            rows.append(_extract_row(result))

    logger.info(f"Parsed {len(rows)} daily cost rows from {len(payload)} batches")
    return rows
