import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel

from logger import get_logger

_logger = get_logger(__name__)

DEFAULT_SECRET = "change-this-secret"
SECRET_KEY = os.getenv("JWT_SECRET", DEFAULT_SECRET)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24
TOKEN_HEADER = "x-auth-token"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)
token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)

if SECRET_KEY == DEFAULT_SECRET:
    _logger.warning("JWT_SECRET is not set; using the insecure default signing key")


class AuthUser(BaseModel):
    """Identity carried by a verified token, attached to the request."""

    id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {"user": {"id": user_id, "role": role}, "exp": expire}
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> AuthUser:
    """Verify signature and expiry; raises JWTError when either fails or the claims are malformed."""
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    user = payload.get("user")
    if not isinstance(user, dict) or not user.get("id"):
        raise JWTError("Token carries no user claim")
    return AuthUser(id=str(user["id"]), role=user.get("role", "user"))


# Dependency: get current user from the raw token header
def get_current_user(token: Optional[str] = Depends(token_header)) -> AuthUser:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token, authorization denied")
    try:
        return decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is not valid")


# Role guard
def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Admin privileges required.")
    return user
