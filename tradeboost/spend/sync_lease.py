"""TradeBoost — Per-user Sync Lease.

A lease row keyed by user id serializes spend syncs for one account. Both
the claim and the takeover of an expired lease are single statements, so
two concurrent requests cannot both win.
"""

import secrets
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from tradeboost.database import native_insert
from tradeboost.models.spend_models import SyncLease
from tradeboost.core.logging import get_logger

logger = get_logger("spend.lease")


def _claim(session: Session, user_id: str, holder: str, expires_at: int) -> bool:
    insert = native_insert(session)
    if insert is not None:
        stmt = (
            insert(SyncLease)
            .values(user_id=user_id, holder=holder, expires_at=expires_at)
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        return session.connection().execute(stmt).rowcount == 1
    try:
        session.add(SyncLease(user_id=user_id, holder=holder, expires_at=expires_at))
        session.flush()
        return True
    except IntegrityError:
        session.rollback()
        return False


def acquire_lease(
    session: Session, user_id: str, ttl_seconds: int, at_ms: int
) -> Optional[str]:
    """Claim the sync lease for ``user_id``; return the holder token or None."""
    holder = secrets.token_hex(8)
    expires_at = at_ms + ttl_seconds * 1000

    acquired = _claim(session, user_id, holder, expires_at)
    if not acquired:
        stmt = (
            update(SyncLease)
            .where(SyncLease.user_id == user_id, SyncLease.expires_at <= at_ms)
            .values(holder=holder, expires_at=expires_at)
        )
        acquired = session.connection().execute(stmt).rowcount == 1
        if acquired:
            logger.warning("Took over expired sync lease", extra={"user_id": user_id})
    session.commit()
    return holder if acquired else None


def release_lease(session: Session, user_id: str, holder: str) -> None:
    """Release the lease if ``holder`` still owns it."""
    session.connection().execute(
        delete(SyncLease).where(SyncLease.user_id == user_id, SyncLease.holder == holder)
    )
    session.commit()
