"""Onboarding profile and Google Ads connection storage."""

from tradeboost.accounts.store import (
    account_currency,
    account_timezone,
    disconnect,
    get_connection,
    save_connection,
    save_profile,
)
from tradeboost.models.account_models import ConnectionIn, ProfileIn

USER = "user-1"


def test_reconnect_keeps_original_created_at(session):
    first = save_connection(
        session,
        USER,
        ConnectionIn(access_token="a1", refresh_token="r1", expires_at=1_000, customer_id="111"),
    )
    created_at = first.created_at

    disconnect(session, USER)
    assert get_connection(session, USER).disconnected_at is not None

    again = save_connection(session, USER, ConnectionIn(access_token="a2", expires_at=2_000))

    assert again.id == first.id
    assert again.created_at == created_at
    assert again.is_active is True
    assert again.disconnected_at is None
    assert again.access_token == "a2"
    # Omitted refresh token and customer id keep their stored values
    assert again.refresh_token == "r1"
    assert again.customer_id == "111"


def test_disconnect_without_connection(session):
    assert disconnect(session, USER) is False


def test_profile_defaults(session):
    assert account_timezone(session, USER) == "Europe/London"
    assert account_currency(session, USER) == "GBP"

    save_profile(
        session, USER, ProfileIn(reporting_timezone="America/New_York", currency_code="USD")
    )

    assert account_timezone(session, USER) == "America/New_York"
    assert account_currency(session, USER) == "USD"
