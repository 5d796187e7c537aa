"""Authentication helpers and FastAPI security dependency.

This module decodes administrator JWT tokens and provides the
`require_admin` dependency that guards owner-only endpoints (answer
keys, assessment edits, response lists, summaries and exports).
Only the first account may register without a token; later accounts
are created by an existing administrator.

Token verification raises HTTPExceptions on failure so it can be used
directly inside route dependencies.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlmodel import Session
from .config import settings
from .database import get_session
from . import models, repositories

bearer_scheme = HTTPBearer()


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail='invalid token')


def require_admin(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
    db: Session = Depends(get_session),
) -> models.User:
    """FastAPI dependency that returns the authenticated administrator.

    Raises HTTPException(401) for a bad, expired or orphaned token.
    """
    payload = decode_token(credentials.credentials)
    user_id = payload.get('user_id')
    if not user_id:
        raise HTTPException(status_code=401, detail='invalid token payload')
    user = repositories.UserRepository(db).get(user_id)
    if not user:
        raise HTTPException(status_code=401, detail='user not found')
    return user


optional_bearer_scheme = HTTPBearer(auto_error=False)


def optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_bearer_scheme),
    db: Session = Depends(get_session),
) -> Optional[models.User]:
    """Like `require_admin`, but returns `None` when no token is sent.

    A token that is sent must still be valid.
    """
    if credentials is None:
        return None
    return require_admin(credentials, db)
