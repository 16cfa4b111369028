"""OAuth2 protocol endpoints: ``/authorize`` and ``/token``."""

from __future__ import annotations

from flask import Blueprint, current_app, redirect, request
from marshmallow import ValidationError

from idserver.api.deps import interactive_flow, json_response, presence_flow, timing, vacant_flow
from idserver.core.errors import APIError, oauth_error_response
from idserver.schemas import (
    AuthorizationQuerySchema,
    ConsentQuerySchema,
    TokenRequestSchema,
    TokenResponseSchema,
)
from idserver.services._shared.errors import ClientNotRegistered, InvalidRequest, OAuthError
from idserver.services.oauth.dto import FlowRedirect

bp = Blueprint("oauth", __name__)

authorization_schema = AuthorizationQuerySchema()
consent_schema = ConsentQuerySchema()
token_request_schema = TokenRequestSchema()
token_response_schema = TokenResponseSchema()


def _see_other(flow: FlowRedirect):
    return redirect(flow.location, code=303)


def _load(schema, data):
    try:
        return schema.load(data)
    except ValidationError as err:
        raise InvalidRequest(_first_message(err)) from err


def _bad_authorization_request(err: OAuthError) -> APIError:
    # No trustworthy redirect URI: answer the user agent directly.
    return APIError(err.description, status_code=400, code=err.error)


def _first_message(err: ValidationError) -> str:
    messages = err.messages if isinstance(err.messages, dict) else {"_": err.messages}
    field, problems = next(iter(messages.items()))
    detail = problems[0] if isinstance(problems, list) and problems else problems
    return f"{field}: {detail}"


@bp.get("/authorize")
@timing
async def authorize_start():
    """Validate the request and send the user agent to the login surface."""

    try:
        params = _load(authorization_schema, request.args)
        flow = await interactive_flow().initiate(params)
    except OAuthError as err:
        raise _bad_authorization_request(err) from err
    return _see_other(flow)


@bp.post("/authorize")
@timing
async def authorize_decide():
    """Consume the passport presence signal and redirect back to the client."""

    try:
        params = _load(authorization_schema, {**request.args.to_dict(), **request.form.to_dict()})
        consent = _load(consent_schema, request.args)
        async with presence_flow() as service:
            flow = await service.decide(params, consent)
    except OAuthError as err:
        raise _bad_authorization_request(err) from err
    return _see_other(flow)


@bp.post("/token")
@timing
async def token():
    """Exchange an authorization code for an access token (RFC 6749 §4.1.3)."""

    try:
        data = _load(token_request_schema, request.form)
        issued = await vacant_flow().exchange(data)
    except OAuthError as err:
        status = 401 if isinstance(err, ClientNotRegistered) else 400
        current_app.logger.info("token.rejected", extra={"reason": type(err).__name__})
        return oauth_error_response(err.error, err.description, status)

    response = json_response(token_response_schema.dump(issued))
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response
