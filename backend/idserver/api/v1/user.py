"""Resource owner endpoint protected by bearer tokens."""

from __future__ import annotations

from flask import Blueprint

from idserver.api.deps import current_grant, json_response, require_oauth, timing
from idserver.schemas import ResourceOwnerSchema

bp = Blueprint("user", __name__)

owner_schema = ResourceOwnerSchema()


@bp.get("/user")
@timing
@require_oauth("user:read", "user")
async def me():
    """Return the owner identity the presented token was issued for."""

    return json_response(owner_schema.dump(current_grant()))
