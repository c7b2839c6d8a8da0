"""Token issuing and decoding."""

import pytest

from arcade_admin.core.config import SecuritySettings, Settings
from arcade_admin.core.errors import UnauthenticatedError
from arcade_admin.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
)
from arcade_admin.modules.accounts.models import Account


@pytest.fixture
def account():
    return Account(id="acc-1", username="sd1", role="super_distributor", unique_id="SD001", password_hash="x")


def test_access_token_round_trip(settings, account):
    data = decode_access_token(create_access_token(account, settings), settings)
    assert (data.account_id, data.username, data.role) == ("acc-1", "sd1", "super_distributor")


def test_refresh_token_carries_account_id(settings, account):
    assert decode_refresh_token(create_refresh_token(account, settings), settings) == "acc-1"


def test_token_kinds_are_not_interchangeable(settings, account):
    with pytest.raises(UnauthenticatedError) as excinfo:
        decode_access_token(create_refresh_token(account, settings), settings)
    assert excinfo.value.code == "INVALID_TOKEN"


def test_expired_access_token(settings, account):
    expired = settings.model_copy(
        update={"security": SecuritySettings(access_token_expire_minutes=-1)}
    )
    with pytest.raises(UnauthenticatedError) as excinfo:
        decode_access_token(create_access_token(account, expired), expired)
    assert excinfo.value.code == "TOKEN_EXPIRED"


def test_wrong_audience_is_rejected(settings, account):
    other = Settings(security=SecuritySettings(audience="somebody-else"))
    with pytest.raises(UnauthenticatedError):
        decode_access_token(create_access_token(account, other), settings)
