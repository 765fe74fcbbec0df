"""
Session tokens and the admin allow-list.

The identity provider bridge signs an HS256 JWT per signed-in user. This
module creates and verifies those tokens and derives the caller's role from
the single configured allow-list.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Iterable, Optional, TypedDict

import jwt

from core.config import settings

logger = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class SessionPayload(TypedDict, total=False):
    sub: str
    email: str
    name: Optional[str]
    picture: Optional[str]
    image: Optional[str]
    exp: int
    iat: int


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as seen by route handlers."""

    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def is_admin_email(email: Optional[str], allow_list: Optional[Iterable[str]] = None) -> bool:
    """
    Check an email against the admin allow-list.

    Comparison is case-insensitive and ignores surrounding whitespace.
    ``allow_list`` defaults to ``settings.admin_emails``.
    """
    if not email:
        return False
    emails = settings.admin_emails if allow_list is None else frozenset(
        e.strip().lower() for e in allow_list
    )
    return email.strip().lower() in emails


def derive_role(email: Optional[str]) -> Role:
    return Role.ADMIN if is_admin_email(email) else Role.USER


def create_session_token(
    email: str,
    name: Optional[str] = None,
    image: Optional[str] = None,
    subject: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """
    Sign a session token.

    Args:
        email: Verified email of the signed-in user
        name: Display name
        image: Avatar URL
        subject: Provider user id; defaults to the email
        expires_in: Lifetime; defaults to ``settings.session_expire_minutes``

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.session_expire_minutes)
    payload: dict[str, Any] = {
        "sub": subject or email,
        "email": email,
        "name": name,
        "picture": image,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> SessionPayload:
    """
    Verify and decode a session token.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Signature or claims are invalid
    """
    payload = jwt.decode(
        token,
        settings.session_secret,
        algorithms=[settings.session_algorithm],
        options={"require": ["exp", "email"]},
    )
    return payload


def principal_from_payload(payload: SessionPayload) -> Optional[Principal]:
    email = (payload.get("email") or "").strip()
    if not email:
        return None
    return Principal(
        email=email,
        name=payload.get("name"),
        image=payload.get("picture") or payload.get("image"),
        role=derive_role(email),
    )
