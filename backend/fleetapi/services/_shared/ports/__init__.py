"""
fleetapi.services._shared.ports
===============================

Ports (hexagonal interfaces) that keep services independent from token
libraries and external identity providers.

Modules
-------
- :mod:`token_signer`:
    Defines :class:`~.AccessTokenSigner`, the abstraction for signing and
    verifying access tokens.
- :mod:`identity_federation`:
    Defines :class:`~.IdentityFederation` and the disabled
    :class:`~.NullIdentityFederation`.

Concrete adapters live under ``fleetapi.infra``.
"""

from __future__ import annotations

from .identity_federation import IdentityFederation, NullIdentityFederation
from .token_signer import AccessTokenSigner

__all__ = ["AccessTokenSigner", "IdentityFederation", "NullIdentityFederation"]
