from __future__ import annotations

from typing import Any, NoReturn

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fleetapi.core.security import burn_password_check
from fleetapi.models.owner import Owner
from fleetapi.models.refresh_token import RefreshToken
from fleetapi.models.user import SystemRoles, User
from fleetapi.services._shared.base import BaseService
from fleetapi.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from fleetapi.services._shared.ports import IdentityFederation, NullIdentityFederation
from fleetapi.services.auth.dto import (
    AuthResult,
    LoginIn,
    OwnerSummaryOut,
    RefreshIn,
    RegisterOwnerIn,
    RevokeIn,
    UserProfileOut,
)
from fleetapi.services.auth.policy import DEFAULT_MIN_LENGTH, password_policy_errors
from fleetapi.services.auth.tokens import Principal, TokenIssuer, TokenPair, hash_refresh_token
from fleetapi.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

INVALID_CREDENTIALS = "Invalid credentials."
INVALID_REFRESH_TOKEN = "Refresh token is invalid or expired."
DUPLICATE_EMAIL = "Email is already registered."


def split_contact_name(full_name: str) -> tuple[str, str]:
    """Split ``"Ada Lovelace"`` into first and last name; the last may be empty."""
    parts = full_name.strip().split(None, 1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


class AuthService(BaseService):
    """
    Session lifecycle: register, login, refresh (single-use rotation), revoke.

    Access tokens come from the :class:`TokenIssuer`; refresh tokens are
    persisted as hashes through the Unit of Work. Every operation that
    writes runs inside exactly one transaction, except registration, which
    commits the account first and then records federation ids and the first
    refresh token in a second transaction.
    """

    def __init__(
        self,
        *,
        issuer: TokenIssuer,
        federation: IdentityFederation | None = None,
        password_min_length: int = DEFAULT_MIN_LENGTH,
        **kwargs: Any,
    ) -> None:
        """
        :param issuer: Builds access/refresh token pairs.
        :param federation: External identity provider (best-effort).
        :param password_min_length: Minimum password length at registration.
        :param kwargs: Forwarded to :class:`BaseService` (``uow_factory``, ``clock``).
        """
        super().__init__(**kwargs)
        self.issuer = issuer
        self.federation: IdentityFederation = federation or NullIdentityFederation()
        self.password_min_length = password_min_length

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterOwnerIn) -> AuthResult:
        """
        Create an owner account and sign it in.

        :param dto: Registration input.
        :returns: Token pair plus owner summary.
        :raises ValidationError: Weak password, company name in the password,
            or unknown city.
        :raises ConflictError: Email already registered (also when a
            concurrent registration wins the unique constraint).

        The account is committed before its first session is issued. If
        issuing fails, the error propagates with the account in place and the
        caller should sign in through :meth:`login` rather than register again.
        """
        email = dto.email.strip().lower()
        company_name = dto.company_name.strip()

        policy_errors = password_policy_errors(
            dto.password, company_name=company_name, min_length=self.password_min_length
        )
        if policy_errors:
            self.log.warning("auth.register.rejected", extra={"event": "weak_password"})
            raise ValidationError("Password does not meet the policy.", {"password": policy_errors})

        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(email):
                    raise ConflictError("User", DUPLICATE_EMAIL, field_name="email")
                if dto.city_id is not None and uow.cities.get(dto.city_id) is None:
                    raise ValidationError("Unknown city.", {"city_id": ["City does not exist."]})

                role = uow.roles.get_or_create(SystemRoles.OWNER)
                user = User(email=email)
                user.password = dto.password
                user.roles.append(role)
                uow.users.add(user)

                owner = Owner(
                    company_name=company_name,
                    contact_email=email,
                    contact_phone=(dto.contact_phone or "").strip() or None,
                    primary_contact_name=dto.primary_contact_name,
                    city_id=dto.city_id,
                    identity_user_id=user.id,
                )
                uow.owners.add(owner)
                user_id, owner_id = user.id, owner.id
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise ConflictError("User", DUPLICATE_EMAIL, field_name="email") from exc
            raise

        self.log.info("auth.register", extra={"user_id": user_id, "owner_id": owner_id})

        group_id, external_subject = self._federate(dto, company_name, email)

        try:
            with self.rw_uow() as uow:
                user = self._require_user(uow, user_id)
                owner = uow.owners.get(owner_id)
                if external_subject:
                    uow.users.assign_updates(user, {"external_subject": external_subject})
                if owner is not None and group_id:
                    uow.owners.assign_updates(owner, {"external_group_id": group_id})
                pair = self.issuer.create_token_pair(user, owner, fresh=True, now=self.now_utc())
                self._store_refresh_token(uow, user.id, pair)
                return self._to_result(pair, owner)
        except SQLAlchemyError:
            self.log.error(
                "auth.register.session_failed",
                extra={"user_id": user_id, "owner_id": owner_id},
                exc_info=True,
            )
            raise

    def _federate(
        self, dto: RegisterOwnerIn, company_name: str, email: str
    ) -> tuple[str | None, str | None]:
        """Provision the owner's group and user upstream; never raises."""
        group_id = self.federation.ensure_owner_group(company_name)
        first_name, last_name = split_contact_name(dto.primary_contact_name)
        external_subject = self.federation.provision_user(
            email=email,
            password=dto.password,
            first_name=first_name,
            last_name=last_name,
            group_id=group_id,
        )
        return group_id, external_subject

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResult:
        """
        Authenticate credentials and issue a fresh token pair.

        Other sessions of the same user stay valid.

        :param dto: Login input.
        :returns: Token pair plus owner summary.
        :raises AuthenticationError: Unknown email, deleted user or wrong
            password, always with the same message.
        """
        email = dto.email.strip().lower()
        now = self.now_utc()
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                burn_password_check(dto.password)
                self._reject_login(reason="unknown_email")
            password_ok = user.verify_password(dto.password)
            if user.is_deleted or not password_ok:
                self._reject_login(reason="bad_password", user_id=user.id)

            user.last_login_at = now
            owner = uow.owners.get_by_user_id(user.id)
            pair = self.issuer.create_token_pair(user, owner, fresh=True, now=now)
            self._store_refresh_token(uow, user.id, pair)
            result = self._to_result(pair, owner)
            user_id = user.id

        self.log.info("auth.login", extra={"user_id": user_id})
        return result

    def _reject_login(self, *, reason: str, user_id: int | None = None) -> NoReturn:
        self.log.warning("auth.login.rejected", extra={"event": reason, "user_id": user_id})
        raise AuthenticationError(INVALID_CREDENTIALS)

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AuthResult:
        """
        Exchange an active refresh token for a new pair and retire the old one.

        The old row is revoked with a compare-and-set update that also records
        the successor's hash; if another request rotated it first, the update
        touches no row and this call fails.

        :param dto: Refresh input.
        :returns: New token pair plus owner summary.
        :raises AuthenticationError: Unknown, expired, revoked or already
            rotated token, or the user is gone.
        """
        if not dto.refresh_token:
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        token_hash = hash_refresh_token(dto.refresh_token)
        now = self.now_utc()
        with self.rw_uow() as uow:
            stored = uow.refresh_tokens.get_by_hash(token_hash)
            if stored is None or not stored.is_active(now):
                self._reject_refresh(stored, reason="inactive")

            user = uow.users.get(stored.user_id)
            if user is None or user.is_deleted:
                self._reject_refresh(stored, reason="user_missing")

            owner = uow.owners.get_by_user_id(user.id)
            pair = self.issuer.create_token_pair(user, owner, now=now)
            won = uow.refresh_tokens.revoke_if_active(
                stored, now=now, replaced_by_hash=pair.refresh_token_hash
            )
            if not won:
                self._reject_refresh(stored, reason="lost_rotation")

            self._store_refresh_token(uow, user.id, pair)
            result = self._to_result(pair, owner)
            user_id = user.id

        self.log.info("auth.refresh", extra={"user_id": user_id})
        return result

    def _reject_refresh(self, stored: RefreshToken | None, *, reason: str) -> NoReturn:
        self.log.warning(
            "auth.refresh.rejected",
            extra={"event": reason, "user_id": stored.user_id if stored else None},
        )
        raise AuthenticationError(INVALID_REFRESH_TOKEN)

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> None:
        """
        Revoke a refresh token.

        Revoking a token that is already revoked or expired is a no-op that
        keeps the original ``revoked_at``. Access tokens already issued stay
        valid until they expire.

        :param dto: Revoke input.
        :raises NotFoundError: No stored token matches (or it belongs to a
            different user than ``requested_by``).
        """
        token_hash = hash_refresh_token(dto.refresh_token or "")
        now = self.now_utc()
        with self.rw_uow() as uow:
            stored = uow.refresh_tokens.get_by_hash(token_hash)
            if stored is None or (
                dto.requested_by is not None and stored.user_id != dto.requested_by
            ):
                raise NotFoundError("Refresh token")
            changed = uow.refresh_tokens.revoke(stored, now=now)
            user_id = stored.user_id

        outcome = "revoked" if changed else "noop"
        self.log.info("auth.revoke", extra={"user_id": user_id, "event": outcome})

    # ------------------------------------------------------------------ #
    # Current principal
    # ------------------------------------------------------------------ #

    def current_user(self, principal: Principal) -> UserProfileOut:
        """
        Load the profile behind a verified access token.

        :raises NotFoundError: The user no longer exists or was deleted.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(principal.subject_id)
            if user is None or user.is_deleted:
                raise NotFoundError("User", principal.subject_id)
            owner = uow.owners.get_by_user_id(user.id)
            return UserProfileOut(
                id=user.id,
                email=user.email,
                roles=tuple(user.role_names),
                last_login_at=user.last_login_at,
                owner=self._owner_summary(owner),
            )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_user(uow: SQLAlchemyUnitOfWork, user_id: int) -> User:
        user = uow.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    def _store_refresh_token(uow: SQLAlchemyUnitOfWork, user_id: int, pair: TokenPair) -> None:
        uow.refresh_tokens.add(
            RefreshToken(
                user_id=user_id,
                token_hash=pair.refresh_token_hash,
                issued_at=pair.refresh_issued_at,
                expires_at=pair.refresh_expires_at,
            )
        )

    @staticmethod
    def _owner_summary(owner: Owner | None) -> OwnerSummaryOut | None:
        if owner is None:
            return None
        city = owner.city
        return OwnerSummaryOut(
            id=owner.id,
            company_name=owner.company_name,
            contact_email=owner.contact_email,
            contact_phone=owner.contact_phone,
            city=city.name if city is not None else None,
            country=city.country.name if city is not None else None,
        )

    def _to_result(self, pair: TokenPair, owner: Owner | None) -> AuthResult:
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_at=pair.access_expires_at,
            owner=self._owner_summary(owner),
        )
