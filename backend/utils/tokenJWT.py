# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from config import settings

# Authorization scheme, tokens come from the hosted auth provider
bearer_scheme = HTTPBearer()


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: str = ""
    token: str = ""


# Issue a token signed with the shared secret (local development and tests)
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Resolve the caller from the bearer token claims, no user table lookup
def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> CurrentUser:
    token = credentials.credentials
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    # Ensure subject is present in the token payload
    if user_id is None:
        raise credentials_exception

    # Portal roles live in app_metadata, plain 'role' is the fallback
    role = (payload.get("app_metadata") or {}).get("role") or payload.get("role") or ""
    return CurrentUser(id=str(user_id), email=payload.get("email"), role=str(role), token=token)


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: CurrentUser = Depends(get_current_user)):
        allowed = {r.lower() for r in allowed_roles}
        if allowed and current_user.role.lower() not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden"
            )
        return current_user
    return _checker


def admin_required(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    return role_required(settings.ADMIN_ROLE)(current_user)
