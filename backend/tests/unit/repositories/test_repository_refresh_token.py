from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fleetapi.repositories.refresh_token import RefreshTokenRepository
from fleetapi.services.auth.tokens import hash_refresh_token
from tests.factories.refresh_token import RefreshTokenFactory

NOW = datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture()
def repo(session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def test_get_by_hash(repo):
    token = RefreshTokenFactory(plain="abc")
    assert repo.get_by_hash(hash_refresh_token("abc")) is token
    assert repo.get_by_hash(hash_refresh_token("other")) is None


def test_revoke_if_active_has_exactly_one_winner(repo):
    token = RefreshTokenFactory(issued_at=NOW)

    first = repo.revoke_if_active(token, now=NOW, replaced_by_hash="next-1")
    second = repo.revoke_if_active(token, now=NOW + timedelta(seconds=1), replaced_by_hash="next-2")

    assert (first, second) == (True, False)
    assert token.revoked_at == NOW
    assert token.replaced_by_token_hash == "next-1"


def test_revoke_if_active_refuses_expired_rows(repo):
    token = RefreshTokenFactory(issued_at=NOW - timedelta(days=20))

    assert repo.revoke_if_active(token, now=NOW) is False
    assert token.revoked_at is None


def test_revoke_keeps_first_timestamp_and_covers_expired(repo):
    token = RefreshTokenFactory(issued_at=NOW - timedelta(days=20))

    assert repo.revoke(token, now=NOW) is True
    assert repo.revoke(token, now=NOW + timedelta(hours=1)) is False
    assert token.revoked_at == NOW
