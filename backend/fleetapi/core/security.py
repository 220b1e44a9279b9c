"""Password hashing helpers built on :mod:`werkzeug.security`."""

from __future__ import annotations

from flask import current_app, has_app_context
from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_HASH_METHOD = "scrypt"

_dummy_hashes: dict[str, str] = {}


def _method() -> str:
    if has_app_context():
        return str(current_app.config.get("PASSWORD_HASH_METHOD") or DEFAULT_HASH_METHOD)
    return DEFAULT_HASH_METHOD


def hash_password(raw: str) -> str:
    """
    Hash ``raw`` with the configured werkzeug method.

    :param raw: Plain text password.
    :returns: Salted hash string including the method prefix.
    :raises ValueError: If ``raw`` is empty.
    """
    if not isinstance(raw, str) or not raw:
        raise ValueError("Password must be a non-empty string.")
    return generate_password_hash(raw, method=_method())


def verify_password(stored_hash: str | None, raw: str) -> bool:
    """Return ``True`` when ``raw`` matches ``stored_hash`` (constant-time compare)."""
    if not stored_hash or not raw:
        return False
    return bool(check_password_hash(stored_hash, raw))


def burn_password_check(raw: str) -> None:
    """
    Spend the same hashing work as a real verification.

    Used when the account does not exist so response timing does not reveal
    whether an email is registered.
    """
    method = _method()
    dummy = _dummy_hashes.get(method)
    if dummy is None:
        dummy = generate_password_hash("not-a-real-password", method=method)
        _dummy_hashes[method] = dummy
    check_password_hash(dummy, raw or "")
