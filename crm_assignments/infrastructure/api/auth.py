"""Bearer-token authentication.

Tokens are issued by the identity provider (Supabase) and signed with the
project's JWT secret. The ``sub`` claim must name an active user profile;
that profile becomes the acting user for the request.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from crm_assignments.application.ports.user_repo import UserRepository
from crm_assignments.config import settings
from crm_assignments.domain.entities.user import User
from crm_assignments.infrastructure.api.dependencies import get_user_repo

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def decode_subject(
    token: str,
    secret: str | None = None,
    algorithm: str | None = None,
    audience: str | None = None,
) -> str | None:
    """Return the verified ``sub`` claim of *token*, or None if it does not verify."""
    secret = settings.jwt_secret if secret is None else secret
    algorithm = algorithm or settings.jwt_algorithm
    audience = settings.jwt_audience if audience is None else audience
    if not secret:
        logger.warning("SUPABASE_JWT_SECRET is not set; rejecting bearer token")
        return None

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience or None,
            options={"verify_aud": bool(audience)},
        )
    except JWTError as e:
        logger.info("Bearer token rejected: %s", e)
        return None

    subject = payload.get("sub")
    return str(subject) if subject else None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserRepository = Depends(get_user_repo),
) -> User:
    if credentials is None:
        raise _unauthorized("Missing or invalid authorization header")

    user_id = decode_subject(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid or expired token")

    user = await users.get_by_id(user_id)
    if user is None:
        raise _unauthorized("User profile not found")
    if not user.is_active:
        raise _unauthorized("User account is deactivated")
    return user
