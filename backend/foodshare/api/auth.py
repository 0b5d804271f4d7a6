"""Bearer Authentication — decodes the caller's JWT into an Actor.

Invariants:
    - Tokens are issued elsewhere; this service only verifies and reads them
    - Actor id comes from `sub` (or `id`), role from `user_type` (or `userType`)
    - Missing, undecodable or incomplete tokens -> 401 with WWW-Authenticate
    - The Actor is immutable and built once per request

Design Decisions:
    - HTTPBearer(auto_error=False): the 401 body is ours, not FastAPI's 403 default
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from foodshare.config import get_settings
from foodshare.core.domain_types import Actor, ActorId, ActorRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def actor_from_claims(claims: dict) -> Actor:
    """Build an Actor from decoded token claims. Raises ValueError if incomplete."""
    raw_id = claims.get("sub", claims.get("id"))
    raw_role = claims.get("user_type", claims.get("userType"))
    if raw_id is None or raw_role is None:
        raise ValueError("token is missing actor id or role")
    return Actor(
        id=ActorId(int(raw_id)),
        role=ActorRole(str(raw_role).strip().lower()),
    )


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Actor:
    """FastAPI dependency: the authenticated caller."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")
    settings = get_settings()
    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return actor_from_claims(claims)
    except (JWTError, ValueError) as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise _unauthorized()
