"""TradeBoost — Account Store (onboarding profile, Google Ads connection)."""

from typing import Optional

from sqlmodel import Session, select

from tradeboost.config import settings
from tradeboost.core.periods import now_ms
from tradeboost.models.account_models import (
    ConnectionIn,
    GoogleAdsConnection,
    OnboardingProfile,
    ProfileIn,
)
from tradeboost.core.logging import get_logger

logger = get_logger("accounts")


def get_profile(session: Session, user_id: str) -> Optional[OnboardingProfile]:
    return session.exec(
        select(OnboardingProfile).where(OnboardingProfile.user_id == user_id)
    ).first()


def save_profile(session: Session, user_id: str, data: ProfileIn) -> OnboardingProfile:
    """Create or update the user's onboarding profile."""
    profile = get_profile(session, user_id) or OnboardingProfile(user_id=user_id)
    for key, value in data.model_dump(mode="json").items():
        setattr(profile, key, value)
    profile.updated_at = now_ms()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info("Saved onboarding profile", extra={"user_id": user_id})
    return profile


def account_timezone(session: Session, user_id: str) -> str:
    """Reporting timezone for the account, falling back to the global default."""
    profile = get_profile(session, user_id)
    if profile and profile.reporting_timezone:
        return profile.reporting_timezone
    return settings.reporting_timezone


def account_currency(session: Session, user_id: str) -> str:
    profile = get_profile(session, user_id)
    if profile and profile.currency_code:
        return profile.currency_code
    return settings.default_currency


def get_connection(session: Session, user_id: str) -> Optional[GoogleAdsConnection]:
    return session.exec(
        select(GoogleAdsConnection).where(GoogleAdsConnection.user_id == user_id)
    ).first()


def save_connection(session: Session, user_id: str, data: ConnectionIn) -> GoogleAdsConnection:
    """Store OAuth tokens, reactivating a previously disconnected account."""
    connection = get_connection(session, user_id)
    if connection is None:
        connection = GoogleAdsConnection(
            user_id=user_id, access_token=data.access_token, expires_at=data.expires_at
        )
    connection.access_token = data.access_token
    if data.refresh_token:
        connection.refresh_token = data.refresh_token
    connection.expires_at = data.expires_at
    connection.scope = data.scope
    if data.customer_id:
        connection.customer_id = data.customer_id
    connection.is_active = True
    connection.disconnected_at = None
    session.add(connection)
    session.commit()
    session.refresh(connection)
    logger.info("Saved Google Ads connection", extra={"user_id": user_id})
    return connection


def disconnect(session: Session, user_id: str) -> bool:
    """Deactivate the connection. Returns False if there was none."""
    connection = get_connection(session, user_id)
    if connection is None:
        return False
    connection.is_active = False
    connection.disconnected_at = now_ms()
    session.add(connection)
    session.commit()
    logger.info("Disconnected Google Ads", extra={"user_id": user_id})
    return True
