"""Refresh token repository with an atomic compare-and-set revoke."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from fleetapi.models.refresh_token import RefreshToken
from fleetapi.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Rows are looked up by hash only; plaintext tokens never reach this layer.
    """

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Return the row stored under ``token_hash`` or ``None``."""
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke_if_active(
        self,
        token: RefreshToken,
        *,
        now: datetime,
        replaced_by_hash: str | None = None,
    ) -> bool:
        """Revoke ``token`` only if it is still active, in a single UPDATE.

        The ``WHERE`` clause re-checks ``revoked_at IS NULL`` and the expiry,
        so when two transactions race on the same row exactly one of them
        sees an affected row count of one.

        :param token: Row previously loaded in this session.
        :param now: Revocation instant (UTC).
        :param replaced_by_hash: Hash of the successor token, when rotating.
        :returns: ``True`` if this call revoked the token, ``False`` if it was
            already revoked or expired.
        """
        values: dict[str, object] = {"revoked_at": now}
        if replaced_by_hash is not None:
            values["replaced_by_token_hash"] = replaced_by_hash
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.id == token.id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at >= now,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        # Reload on next access so callers observe the stored state
        self.session.expire(token)
        return result.rowcount == 1

    def revoke(self, token: RefreshToken, *, now: datetime) -> bool:
        """Stamp ``revoked_at`` unless it is already set.

        Unlike :meth:`revoke_if_active` this also revokes expired tokens. The
        first revocation instant is never overwritten.

        :returns: ``True`` if this call set ``revoked_at``.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token.id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self.session.expire(token)
        return result.rowcount == 1
