from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from pydantic import BaseModel

from .config import settings, session_expires

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10, bcrypt__truncate_error=False)


class SessionData(BaseModel):
    user_id: int
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or session_expires())
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def establish_session(response: Response, user_id: int, identifier: str, role: str) -> str:
    """
    Persist an authenticated session for the user.
    The identifier lands in the ``phone`` or ``email`` claim depending on its shape.
    """
    claims = {"sub": str(user_id), "role": role}
    if "@" in identifier:
        claims["email"] = identifier
    else:
        claims["phone"] = identifier
    token = create_access_token(claims)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=int(session_expires().total_seconds()),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return token


def clear_session(response: Response):
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")


def decode_session_token(token: str) -> Optional[SessionData]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        user_id = payload.get("sub")
        if user_id is None:
            return None
    except jwt.PyJWTError:
        return None

    return SessionData(
        user_id=int(user_id),
        role=payload.get("role", ""),
        email=payload.get("email"),
        phone=payload.get("phone"),
    )


# Bearer is accepted alongside the session cookie for API clients
http_bearer_optional = HTTPBearer(auto_error=False)


def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer_optional),
) -> Optional[SessionData]:
    """Return the caller's session, or None when not logged in."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        return None
    return decode_session_token(token)
