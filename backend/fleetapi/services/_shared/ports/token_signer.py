from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class AccessTokenSigner(Protocol):
    """Port for signing and verifying JWT access tokens."""

    def sign(
        self,
        *,
        identity: str,
        claims: dict[str, Any],
        expires_delta: timedelta,
        fresh: bool = False,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]:
        """Verify ``token`` and return its claims; raise on any failure."""
        ...
