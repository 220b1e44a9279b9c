"""Password rules applied at registration."""

from __future__ import annotations

DEFAULT_MIN_LENGTH = 12


def password_policy_errors(
    password: str,
    *,
    company_name: str | None = None,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> list[str]:
    """
    Return every policy violation for ``password`` (empty when acceptable).

    :param password: Candidate password.
    :param company_name: Must not appear in the password, ignoring case.
    :param min_length: Minimum number of characters.
    """
    errors: list[str] = []
    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long.")
    if not any(c.isupper() for c in password):
        errors.append("Password must contain an upper-case letter.")
    if not any(c.islower() for c in password):
        errors.append("Password must contain a lower-case letter.")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain a digit.")
    if all(c.isalnum() for c in password):
        errors.append("Password must contain a symbol.")

    company = (company_name or "").strip().casefold()
    if company and company in password.casefold():
        errors.append("Password must not contain the company name.")
    return errors
