"""TradeBoost — Ad-Spend Snapshot Store.

Per-day, per-user spend rows. Writes replace the whole row: the ads
platform's figure for a day is authoritative and may be revised later, so
amounts are never accumulated.
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from tradeboost.core.errors import SnapshotValidationError
from tradeboost.core.periods import now_ms
from tradeboost.database import native_insert
from tradeboost.models.spend_models import AdSpendSnapshot, SourceMeta
from tradeboost.core.logging import get_logger

logger = get_logger("spend.store")

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

# Largest value a BIGINT column holds
MAX_SPEND_MICROS = 2**63 - 1


def coerce_spend_micros(value: Any) -> int:
    """Validate spend micros: integers in [0, 2**63), or strings of them."""
    if isinstance(value, bool):
        raise SnapshotValidationError(f"Invalid spend micros: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise SnapshotValidationError(f"Invalid spend micros: {value!r}")
        if len(text.lstrip("0")) > len(str(MAX_SPEND_MICROS)):
            raise SnapshotValidationError(f"Spend micros out of range: {value!r}")
        value = int(text)
    if isinstance(value, float):
        if not value.is_integer():
            raise SnapshotValidationError(f"Fractional spend micros: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise SnapshotValidationError(f"Invalid spend micros: {value!r}")
    if value < 0:
        raise SnapshotValidationError(f"Negative spend micros: {value}")
    if value > MAX_SPEND_MICROS:
        raise SnapshotValidationError(f"Spend micros out of range: {value}")
    return value


def validate_date(date: Any) -> str:
    """Return ``date`` if it is a YYYY-MM-DD string."""
    if not isinstance(date, str) or not DATE_PATTERN.fullmatch(date):
        raise SnapshotValidationError(f"Invalid snapshot date: {date!r}")
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError as e:
        raise SnapshotValidationError(f"Invalid snapshot date: {date!r}") from e
    return date


def find_snapshot(session: Session, user_id: str, date: str) -> Optional[AdSpendSnapshot]:
    return session.exec(
        select(AdSpendSnapshot).where(
            AdSpendSnapshot.user_id == user_id,
            AdSpendSnapshot.date == date,
        )
    ).first()


def upsert_daily_spend(
    session: Session,
    user_id: str,
    date: str,
    currency_code: str,
    spend_micros: Any,
    source_meta: Optional[SourceMeta] = None,
    synced_at: Optional[int] = None,
) -> int:
    """Create or fully replace the snapshot for (user_id, date); return its id.

    ``synced_at`` defaults to the current wall-clock time in epoch ms.
    """
    date = validate_date(date)
    spend_micros = coerce_spend_micros(spend_micros)
    source_meta = source_meta or SourceMeta()

    values = {
        "user_id": user_id,
        "date": date,
        "currency_code": currency_code,
        "spend_micros": spend_micros,
        "synced_at": synced_at if synced_at is not None else now_ms(),
        "source": source_meta.source,
        "google_customer_id": source_meta.google_customer_id,
    }

    insert = native_insert(session)
    if insert is not None:
        stmt = insert(AdSpendSnapshot).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={k: stmt.excluded[k] for k in values if k not in ("user_id", "date")},
        )
        session.connection().execute(stmt)
    else:
        existing = find_snapshot(session, user_id, date)
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            session.add(existing)
        else:
            session.add(AdSpendSnapshot(**values))
    session.commit()

    snapshot = find_snapshot(session, user_id, date)
    if snapshot is None:
        raise RuntimeError(f"Snapshot {user_id}/{date} missing after upsert")
    # Identity map may hold a pre-upsert copy
    session.refresh(snapshot)
    logger.debug(
        f"Upserted spend {date}: {spend_micros} micros {currency_code}",
        extra={"user_id": user_id},
    )
    return snapshot.id


def snapshots_for_month(
    session: Session, user_id: str, month_key: str
) -> List[AdSpendSnapshot]:
    """All snapshots whose date falls in ``month_key`` (YYYY-MM)."""
    return list(
        session.exec(
            select(AdSpendSnapshot)
            .where(
                AdSpendSnapshot.user_id == user_id,
                AdSpendSnapshot.date >= f"{month_key}-01",
                AdSpendSnapshot.date <= f"{month_key}-31",
            )
            .order_by(AdSpendSnapshot.date)
        ).all()
    )


def latest_synced_at(session: Session, user_id: str, month_key: str) -> Optional[int]:
    """Most recent ``synced_at`` across the month's snapshots, or None."""
    return session.exec(
        select(func.max(AdSpendSnapshot.synced_at)).where(
            AdSpendSnapshot.user_id == user_id,
            AdSpendSnapshot.date >= f"{month_key}-01",
            AdSpendSnapshot.date <= f"{month_key}-31",
        )
    ).one()
