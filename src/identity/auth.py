"""Bearer-token authentication for the HTTP API.

Tokens are HS256 JWTs with ``sub`` (the user id) and ``role``. Routes depend
on :func:`current_user` or :func:`require_admin`; both answer 401 for a
missing or invalid token and the latter 403 for non-admins.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
import structlog
from fastapi import Depends, Header, HTTPException, Request

from identity.customer.customer import CustomerRole
from shared.config import Settings
from shared.logging import add_context

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == CustomerRole.ADMIN.value


def issue_token(settings: Settings, user_id: str, role: str = CustomerRole.CUSTOMER.value) -> str:
    """Sign a token for ``user_id``."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": CustomerRole(role).value,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(settings: Settings, token: str) -> AuthenticatedUser:
    """Verify ``token`` and return its user.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or missing claims.
    """
    claims = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    role = claims.get("role", CustomerRole.CUSTOMER.value)
    if role not in {r.value for r in CustomerRole}:
        raise jwt.InvalidTokenError(f"Unknown role: {role}")
    return AuthenticatedUser(user_id=claims["sub"], role=role)


async def current_user(request: Request, authorization: str = Header(default="")) -> AuthenticatedUser:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    settings: Settings = request.app.state.settings
    try:
        user = decode_token(settings, authorization.removeprefix("Bearer ").strip())
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token", reason=str(exc))
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    add_context(user_id=user.user_id)
    return user


async def require_admin(user: AuthenticatedUser = Depends(current_user)) -> AuthenticatedUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user
