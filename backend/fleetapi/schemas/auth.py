"""Authentication-related Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import Schema, fields, post_load, validate

from fleetapi.services.auth.dto import LoginIn, RefreshIn, RegisterOwnerIn


class RegisterOwnerSchema(Schema):
    """Input payload for owner self-registration."""

    company_name = fields.String(
        required=True, data_key="companyName", validate=validate.Length(min=1, max=200)
    )
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    primary_contact_name = fields.String(
        required=True, data_key="primaryContactName", validate=validate.Length(min=1, max=200)
    )
    contact_phone = fields.String(
        load_default=None, allow_none=True, data_key="contactPhone", validate=validate.Length(max=32)
    )
    city_id = fields.Integer(
        load_default=None, allow_none=True, data_key="cityId", validate=validate.Range(min=1)
    )

    @post_load
    def _to_dto(self, data, **kwargs) -> RegisterOwnerIn:
        return RegisterOwnerIn(**data)


class LoginSchema(Schema):
    """Input payload for authenticating a user (no policy hints on purpose)."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @post_load
    def _to_dto(self, data, **kwargs) -> LoginIn:
        return LoginIn(**data)


class RefreshTokenSchema(Schema):
    """Input payload for refresh and revoke."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1, max=512)
    )

    @post_load
    def _to_dto(self, data, **kwargs) -> RefreshIn:
        return RefreshIn(**data)


class OwnerSummarySchema(Schema):
    id = fields.Integer()
    company_name = fields.String(data_key="companyName")
    contact_email = fields.String(data_key="contactEmail")
    contact_phone = fields.String(data_key="contactPhone", allow_none=True)
    city = fields.String(allow_none=True)
    country = fields.String(allow_none=True)


class AuthResultSchema(Schema):
    """Response payload returned by register, login and refresh."""

    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")
    expires_at = fields.DateTime(format="iso", data_key="expiresAtUtc")
    owner = fields.Nested(OwnerSummarySchema, allow_none=True)


class UserProfileSchema(Schema):
    """Response payload for ``GET /auth/me``."""

    id = fields.Integer()
    email = fields.String()
    roles = fields.List(fields.String())
    last_login_at = fields.DateTime(format="iso", data_key="lastLoginAtUtc", allow_none=True)
    owner = fields.Nested(OwnerSummarySchema, allow_none=True)
