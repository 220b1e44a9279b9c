from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)


class IdentityFederation(Protocol):
    """
    Port for provisioning owners with an external identity provider.

    Both calls are best-effort: implementations return ``None`` when the
    provider is disabled, unreachable or rejects the request, and never
    raise into the caller.
    """

    def ensure_owner_group(self, company_name: str) -> str | None:
        """Return the provider group id for ``company_name``, creating it if needed."""
        ...

    def provision_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        group_id: str | None = None,
    ) -> str | None:
        """Create and activate a provider user; return its id."""
        ...


class NullIdentityFederation(IdentityFederation):
    """Federation disabled: every call reports "feature unavailable"."""

    def ensure_owner_group(self, company_name: str) -> str | None:
        log.debug("identity_federation.disabled", extra={"event": "ensure_owner_group"})
        return None

    def provision_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        group_id: str | None = None,
    ) -> str | None:
        log.debug("identity_federation.disabled", extra={"event": "provision_user"})
        return None
