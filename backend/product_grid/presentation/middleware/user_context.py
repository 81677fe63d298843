"""User context middleware — reads, never enforces.

A ``Bearer`` token's payload is decoded without signature verification and
attached to ``request.state.user``. Requests without a usable token proceed
anonymously with ``request.state.user = None``.
"""

import logging
import time
from typing import Any

import jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def read_user_context(authorization: str | None) -> dict[str, Any] | None:
    """Return the token payload, or None for a missing, malformed or expired token."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        logger.warning("Ignoring unreadable bearer token: %s", exc)
        return None

    exp = payload.get("exp")
    if isinstance(exp, (int, float)) and exp < time.time():
        logger.info("Ignoring expired bearer token for %s", payload.get("username"))
        return None
    return payload


class UserContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.user = read_user_context(request.headers.get("Authorization"))
        return await call_next(request)
