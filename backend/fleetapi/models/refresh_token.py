"""Persisted refresh token record (hash only, never the plaintext)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetapi.core.extensions import db

from .base import PKMixin, ReprMixin, UTCDateTime, utcnow

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Server-side state of one refresh token.

    A token is *active* while ``revoked_at`` is unset and ``expires_at`` has
    not passed. Rows are only ever mutated to revoke them; they are never
    deleted so reuse of a rotated token can still be recognised.

    Fields
    ------
    token_hash : str
        SHA-256 hex digest of the opaque token handed to the client.
    issued_at / expires_at : datetime
        Lifetime bounds (UTC).
    revoked_at : datetime | None
        First revocation instant; never overwritten.
    replaced_by_token_hash : str | None
        Hash of the token issued when this one was rotated.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    issued_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    replaced_by_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (Index("ix_refresh_tokens_user_id_expires_at", "user_id", "expires_at"),)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def is_active(self, now: datetime | None = None) -> bool:
        """Return ``True`` when the token is neither revoked nor expired at ``now``."""
        return self.revoked_at is None and not self.is_expired(now)
