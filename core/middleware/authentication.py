"""
Session authentication middleware.

Reads the session token from the ``Authorization: Bearer`` header or the
session cookie, verifies it, and stores the resulting Principal on
``request.state.principal``. It never rejects a request: routes decide
whether a principal is required (see api.dependencies).
"""

import logging
from typing import Callable, Optional

import jwt
from fastapi import Request

from core.config import settings
from core.security import Principal, decode_session_token, principal_from_payload

logger = logging.getLogger(__name__)


class SessionAuthenticationMiddleware:
    """ASGI middleware that resolves the caller's principal, if any."""

    def __init__(self, app: Callable, cookie_name: Optional[str] = None):
        self.app = app
        self.cookie_name = cookie_name or settings.session_cookie_name

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        scope.setdefault("state", {})
        scope["state"]["principal"] = self._resolve_principal(request)

        await self.app(scope, receive, send)

    def _extract_token(self, request: Request) -> Optional[str]:
        """Bearer header first, then the session cookie."""
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return auth_header[7:]
        return request.cookies.get(self.cookie_name)

    def _resolve_principal(self, request: Request) -> Optional[Principal]:
        token = self._extract_token(request)
        if not token:
            return None

        try:
            payload = decode_session_token(token)
        except jwt.ExpiredSignatureError:
            logger.info("Expired session token presented")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid session token: {str(e)}")
            return None

        return principal_from_payload(payload)


def get_principal(request: Request) -> Optional[Principal]:
    """Principal set by SessionAuthenticationMiddleware, or None."""
    return getattr(request.state, "principal", None)
