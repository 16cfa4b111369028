# idserver/services/oauth/service.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import timedelta
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from idserver.services._shared.base import BaseService
from idserver.services._shared.errors import (
    ClientNotRegistered,
    CodeInvalidOrConsumed,
    ConsentDenied,
    ConsentError,
    InsufficientScope,
    InvalidRequest,
    ScopeNotGranted,
    TokenExpired,
    TokenInvalid,
    TokenMissing,
    UnsupportedGrantType,
)
from idserver.services._shared.ports.code_authorizer import CodeAuthorizer
from idserver.services._shared.ports.token_issuer import TokenIssuer
from idserver.services.consent.dto import Authorized, Denied, InProgress, Solicitation
from idserver.services.consent.service import ConsentGate
from idserver.services.oauth.dto import (
    AuthorizationIn,
    ConsentIn,
    FlowRedirect,
    Grant,
    PreGrant,
    Scope,
    TokenIn,
    TokenOut,
    same_redirect_uri,
)
from idserver.services.oauth.registry import ClientRegistry

log = logging.getLogger(__name__)

AUTHORIZATION_CODE = "authorization_code"
DEFAULT_CODE_TTL = timedelta(minutes=10)


def with_query(uri: str, params: dict[str, str]) -> str:
    """Append ``params`` to ``uri`` keeping any query it already carries."""
    parts = urlsplit(uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_bearer(header: str | None) -> str:
    """
    Extract the credentials of an ``Authorization: Bearer <token>`` header.

    :raises TokenMissing: Header absent or not using the Bearer scheme.
    """
    if not header:
        raise TokenMissing()
    scheme, _, credentials = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        raise TokenMissing()
    return credentials.strip()


class AuthorizationFlowService(BaseService):
    """
    Authorization-code grant state machine.

    Four entry points compose the client registry, a consent gate, the code
    authorizer and a token issuer:

    * :meth:`initiate`: ``GET /authorize``
    * :meth:`decide`: ``POST /authorize``
    * :meth:`exchange`: ``POST /token``
    * :meth:`check_resource`: bearer-protected endpoints

    Validation errors that leave no trustworthy redirect URI
    (:class:`ClientNotRegistered`, :class:`RedirectMismatch`,
    :class:`InvalidRequest`) propagate; everything the client is entitled to
    learn about is delivered as an error redirect.
    """

    def __init__(
        self,
        *,
        registry: ClientRegistry,
        gate: ConsentGate,
        authorizer: CodeAuthorizer,
        issuer: TokenIssuer,
        code_ttl: timedelta = DEFAULT_CODE_TTL,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.registry = registry
        self.gate = gate
        self.authorizer = authorizer
        self.issuer = issuer
        self.code_ttl = code_ttl

    # ------------------------------------------------------------------ #
    # Authorization endpoint
    # ------------------------------------------------------------------ #

    async def initiate(self, request: AuthorizationIn) -> FlowRedirect:
        """Validate the request and hand the user agent to the consent surface."""
        return await self._authorize(request, ConsentIn())

    async def decide(self, request: AuthorizationIn, consent: ConsentIn) -> FlowRedirect:
        """Run the consent decision and redirect back to the client."""
        return await self._authorize(request, consent)

    async def _authorize(self, request: AuthorizationIn, consent: ConsentIn) -> FlowRedirect:
        if request.response_type != "code":
            raise InvalidRequest("response_type must be 'code'")

        try:
            pre_grant = self.registry.check(
                request.client_id,
                redirect_uri=request.redirect_uri,
                scope=request.scope,
                state=request.state,
            )
        except ScopeNotGranted as exc:
            client = self.registry.lookup(request.client_id)
            if client is None:
                raise ClientNotRegistered() from exc
            log.info("authorization.invalid_scope", extra={"client_id": request.client_id})
            return self._error_redirect(client.redirect_uri, exc.error, request.state)

        try:
            decision = await self.gate.decide(Solicitation(pre_grant=pre_grant, consent=consent))
            if isinstance(decision, Denied):
                raise ConsentDenied()
        except ConsentError as exc:
            log.info(
                "consent.rejected",
                extra={"client_id": pre_grant.client_id, "reason": exc.reason},
            )
            return self._error_redirect(pre_grant.redirect_uri, exc.error, pre_grant.state)

        if isinstance(decision, InProgress):
            return FlowRedirect(location=decision.location)
        if not isinstance(decision, Authorized):
            raise TypeError(f"Unexpected consent decision: {decision!r}")
        return await self._issue_code(pre_grant, decision.owner_id)

    async def _issue_code(self, pre_grant: PreGrant, owner_id: str) -> FlowRedirect:
        grant = Grant(
            owner_id=owner_id,
            client_id=pre_grant.client_id,
            scope=pre_grant.scope,
            redirect_uri=pre_grant.redirect_uri,
            until=self.now_utc() + self.code_ttl,
        )
        code = await self.authorizer.authorize(grant)
        log.info(
            "authorization.code_issued",
            extra={"client_id": grant.client_id, "owner_id": owner_id},
        )
        params = {"code": code}
        if pre_grant.state is not None:
            params["state"] = pre_grant.state
        return FlowRedirect(location=with_query(pre_grant.redirect_uri, params))

    @staticmethod
    def _error_redirect(redirect_uri: str, error: str, state: str | None) -> FlowRedirect:
        params = {"error": error}
        if state is not None:
            params["state"] = state
        return FlowRedirect(location=with_query(redirect_uri, params))

    # ------------------------------------------------------------------ #
    # Token endpoint
    # ------------------------------------------------------------------ #

    async def exchange(self, request: TokenIn) -> TokenOut:
        """
        Redeem an authorization code for an access token.

        :raises UnsupportedGrantType: ``grant_type`` other than ``authorization_code``.
        :raises ClientNotRegistered: Missing or unknown ``client_id``.
        :raises InvalidRequest: Missing ``code``.
        :raises CodeInvalidOrConsumed: Unknown, used, expired or mismatching code.
        """
        if request.grant_type != AUTHORIZATION_CODE:
            raise UnsupportedGrantType()
        if not request.client_id or self.registry.lookup(request.client_id) is None:
            raise ClientNotRegistered()
        if not request.code:
            raise InvalidRequest("code is required")

        grant = await self.authorizer.extract(request.code)
        if grant is None:
            log.info("token.code_rejected", extra={"client_id": request.client_id})
            raise CodeInvalidOrConsumed()

        # The code is spent from here on, whatever the outcome.
        if grant.client_id != request.client_id:
            raise CodeInvalidOrConsumed()
        redirect_uri = request.redirect_uri
        if redirect_uri and not same_redirect_uri(redirect_uri, grant.redirect_uri):
            raise CodeInvalidOrConsumed()
        now = self.now_utc()
        if grant.until <= now:
            raise CodeInvalidOrConsumed("Authorization code has expired")

        issued = await self.issuer.issue(grant)
        log.info(
            "token.issued",
            extra={"client_id": grant.client_id, "owner_id": grant.owner_id},
        )
        return TokenOut(
            access_token=issued.token,
            token_type=issued.token_type,
            expires_in=max(0, int((issued.until - now).total_seconds())),
            scope=str(grant.scope),
        )

    # ------------------------------------------------------------------ #
    # Resource check
    # ------------------------------------------------------------------ #

    async def check_resource(
        self, authorization: str | None, scopes: Iterable[str] = ()
    ) -> Grant:
        """
        Recover the grant proven by a bearer token.

        When ``scopes`` is non-empty the grant must cover at least one of them.

        :raises TokenMissing: No bearer credentials supplied.
        :raises TokenInvalid: Unknown or malformed token.
        :raises TokenExpired: Token past its expiry.
        :raises InsufficientScope: None of ``scopes`` is granted.
        """
        token = parse_bearer(authorization)
        grant = await self.issuer.recover(token)
        if grant is None:
            raise TokenInvalid()
        if grant.until <= self.now_utc():
            raise TokenExpired()

        required = list(scopes)
        if required and not any(grant.scope.allows(Scope.parse(s)) for s in required):
            raise InsufficientScope()
        return grant
