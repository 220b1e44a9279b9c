"""Okta-compatible identity provider adapter (REST, SSWS token auth)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from fleetapi.services._shared.ports import IdentityFederation

log = logging.getLogger(__name__)

GROUP_PREFIX = "fleet-"


def owner_group_name(company_name: str) -> str:
    """Return the provider group name for a tenant (``fleet-<company lower-cased>``)."""
    return f"{GROUP_PREFIX}{company_name.strip().lower()}"


def _resource_id(body: Any, *, action: str) -> str | None:
    """Return ``body["id"]`` from a created resource, or ``None`` for any other shape."""
    if isinstance(body, dict) and isinstance(body.get("id"), (str, int)) and body["id"] != "":
        return str(body["id"])
    if body is not None:
        log.warning("okta.unexpected_body", extra={"event": action})
    return None


class OktaIdentityFederation(IdentityFederation):
    """
    Provision owner groups and users at an Okta org.

    Every call is bounded by ``timeout`` seconds. Timeouts, connection
    errors and non-2xx responses are logged as warnings and reported as
    ``None`` so registration never fails because the provider is down.

    :param domain: Org domain such as ``acme.okta.com`` (scheme optional).
    :param api_token: API token sent as ``Authorization: SSWS <token>``.
    :param timeout: Per-request timeout in seconds.
    :param session: Optional pre-built :class:`requests.Session`.
    """

    def __init__(
        self,
        *,
        domain: str,
        api_token: str,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        domain = (domain or "").strip().rstrip("/")
        if domain and not domain.startswith(("http://", "https://")):
            domain = f"https://{domain}"
        self.base_url = domain
        self.api_token = (api_token or "").strip()
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> OktaIdentityFederation:
        return cls(
            domain=str(config.get("OKTA_DOMAIN") or ""),
            api_token=str(config.get("OKTA_API_TOKEN") or ""),
            timeout=float(config.get("OKTA_TIMEOUT_SECONDS") or 5.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_token)

    # ------------------------------------------------------------------ #
    # HTTP plumbing
    # ------------------------------------------------------------------ #

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"SSWS {self.api_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _call(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> Any | None:
        """Send one request and return the decoded JSON body, or ``None`` on any failure."""
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers(),
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except requests.Timeout:
            log.warning("okta.timeout", extra={"event": action})
            return None
        except requests.RequestException as exc:
            log.warning("okta.unreachable: %s", exc, extra={"event": action})
            return None

        if not resp.ok:
            log.warning("okta.rejected status=%s", resp.status_code, extra={"event": action})
            return None
        try:
            return resp.json()
        except ValueError:
            log.warning("okta.invalid_json", extra={"event": action})
            return None

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def ensure_owner_group(self, company_name: str) -> str | None:
        """Find the tenant's group by name, creating it when missing."""
        if not self.configured:
            log.warning("okta.not_configured", extra={"event": "ensure_owner_group"})
            return None

        name = owner_group_name(company_name)
        found = self._call(
            "GET", "/api/v1/groups", action="search_group", params={"q": name, "limit": 1}
        )
        if isinstance(found, list):
            for group in found:
                if not isinstance(group, dict) or not group.get("id"):
                    continue
                profile = group.get("profile")
                if isinstance(profile, dict) and profile.get("name") == name:
                    return str(group["id"])

        created = self._call(
            "POST",
            "/api/v1/groups",
            action="create_group",
            json={"profile": {"name": name, "description": f"Fleet owner group for {company_name}"}},
        )
        group_id = _resource_id(created, action="create_group")
        if group_id is None:
            return None
        log.info("okta.group_created", extra={"event": "create_group"})
        return group_id

    def provision_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        group_id: str | None = None,
    ) -> str | None:
        """Create and activate the user, optionally inside ``group_id``."""
        if not self.configured:
            log.warning("okta.not_configured", extra={"event": "provision_user"})
            return None

        body: dict[str, Any] = {
            "profile": {
                "firstName": first_name or email,
                "lastName": last_name or "-",
                "email": email,
                "login": email,
            },
            "credentials": {"password": {"value": password}},
        }
        if group_id:
            body["groupIds"] = [group_id]

        created = self._call(
            "POST",
            "/api/v1/users",
            action="provision_user",
            params={"activate": "true"},
            json=body,
        )
        user_id = _resource_id(created, action="provision_user")
        if user_id is None:
            return None
        log.info("okta.user_provisioned", extra={"event": "provision_user"})
        return user_id
