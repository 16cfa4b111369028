"""OAuth endpoint Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from idserver.services.oauth.dto import AuthorizationIn, ConsentIn, TokenIn


class _FormSchema(Schema):
    class Meta:
        # Clients routinely send extra parameters; ignore them.
        unknown = EXCLUDE


class AuthorizationQuerySchema(_FormSchema):
    """Authorization request parameters (query string or form body)."""

    client_id = fields.String(required=True, validate=validate.Length(min=1, max=64))
    response_type = fields.String(load_default="code", validate=validate.OneOf(["code"]))
    redirect_uri = fields.String(load_default=None, validate=validate.Length(max=2048))
    scope = fields.String(load_default=None, validate=validate.Length(max=1024))
    state = fields.String(load_default=None, validate=validate.Length(max=1024))

    @post_load
    def to_dto(self, data, **kwargs) -> AuthorizationIn:
        return AuthorizationIn(**data)


class ConsentQuerySchema(_FormSchema):
    """Consent submission query parameters (``?id=<badge>&allow=<bool>``)."""

    id = fields.Integer(load_default=None, strict=False)
    allow = fields.Boolean(load_default=False)

    @post_load
    def to_dto(self, data, **kwargs) -> ConsentIn:
        return ConsentIn(owner_id=data["id"], allow=data["allow"])


class TokenRequestSchema(_FormSchema):
    """Token endpoint form body."""

    grant_type = fields.String(required=True)
    client_id = fields.String(load_default=None)
    code = fields.String(load_default=None)
    redirect_uri = fields.String(load_default=None)

    @post_load
    def to_dto(self, data, **kwargs) -> TokenIn:
        return TokenIn(**data)


class TokenResponseSchema(Schema):
    """Successful token endpoint response."""

    access_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)
    scope = fields.String(required=True)


class ResourceOwnerSchema(Schema):
    """``GET /api/v1/user`` response."""

    id = fields.Integer(required=True, attribute="owner_id")
    client_id = fields.String(required=True)
    scope = fields.Function(lambda grant: str(grant.scope))
