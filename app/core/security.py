import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Header

from app.core.context import AppContext, get_context
from app.core.errors import Forbidden, InvalidCredentials, InvalidToken, Unauthenticated
from app.core.logger import logger

ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies signed, time-limited admin tokens."""

    def __init__(self, secret: str, ttl_hours: int = 4):
        self.secret = secret
        self.ttl = timedelta(hours=ttl_hours)

    def issue(self, identity: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "email": identity,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decodes the token and checks signature + expiry.
        Raises InvalidToken on any failure.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken(str(e)) from e

        if not claims.get("email"):
            raise InvalidToken("Token has no identity claim")
        return claims


def authenticate_admin(ctx: AppContext, email: str, password: str) -> str:
    """
    Checks admin credentials against the configured login and returns a fresh token.
    Unconfigured credentials reject every login.
    """
    expected_email = ctx.settings.ADMIN_LOGIN_EMAIL
    expected_password = ctx.settings.ADMIN_LOGIN_PASSWORD

    if not expected_email or not expected_password:
        logger.warning("⚠️ Admin login attempted but ADMIN_LOGIN_EMAIL/ADMIN_LOGIN_PASSWORD are not set")
        raise InvalidCredentials()

    email_ok = hmac.compare_digest((email or "").encode(), expected_email.encode())
    password_ok = hmac.compare_digest((password or "").encode(), expected_password.encode())
    if not (email_ok and password_ok):
        logger.warning(f"🔒 Failed admin login for '{email}'")
        raise InvalidCredentials()

    logger.info(f"🔑 Admin login: {email}")
    return ctx.tokens.issue(email)


async def require_admin(
    authorization: Optional[str] = Header(None),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """
    Guard for admin routes. Expects `Authorization: Bearer <token>`.
    Missing/malformed header -> 401, bad or expired token -> 403.
    """
    if not authorization:
        raise Unauthenticated("No token provided")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Invalid token format")

    try:
        return ctx.tokens.verify(parts[1])
    except InvalidToken as e:
        logger.warning(f"🚫 Rejected admin token: {e}")
        raise Forbidden("Invalid or expired token")
