import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .db import get_db
from .errors import AuthError
from .models import User
from .settings import settings

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _bcrypt_input(password: str) -> bytes:
    # bcrypt reads at most 72 bytes; longer passwords are reduced to their SHA-256 digest
    raw = password.encode("utf-8")
    if len(raw) <= 72:
        return raw
    return hashlib.sha256(raw).digest()


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_bcrypt_input(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def _clean_token(token: str) -> str:
    """
    Tolerate clients that stored 'Bearer <jwt>' and then send
    'Authorization: Bearer Bearer <jwt>'.
    """
    t = (token or "").strip()
    for _ in range(3):
        if t.lower().startswith("bearer "):
            t = t[7:].strip()
        else:
            break
    return t


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def safe_decode_sub(token: str) -> Optional[str]:
    token = _clean_token(token)
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise AuthError("Not authenticated")

    sub = safe_decode_sub(token)
    if not sub or not sub.isdigit():
        logger.debug("rejected bearer token")
        raise AuthError("Invalid or expired token")

    user = db.get(User, int(sub))
    if user is None:
        raise AuthError("User no longer exists")
    return user
