"""
Single-admin authentication: password hashing and bearer tokens.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header
from jose import JWTError, jwt
from passlib.context import CryptContext

from portfolio_api.config import Settings, get_settings
from portfolio_api.db import AdminRecord, DbClient
from portfolio_api.dependencies import get_db_client
from portfolio_api.errors import Forbidden, Unauthorized

# pbkdf2_sha256 avoids the native bcrypt dependency.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    admin: AdminRecord,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": admin.email, "role": admin.role, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def authenticate(db: DbClient, email: str, password: str) -> Optional[AdminRecord]:
    admin = db.get_admin(email or "")
    if admin is None or not verify_password(password, admin.password_hash):
        return None
    return admin


def require_admin(
    authorization: Optional[str] = Header(None),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
) -> AdminRecord:
    """FastAPI dependency gating admin-only routes."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthorized("No token, authorization denied")
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise Unauthorized("Token is not valid")

    email = payload.get("sub")
    admin = db.get_admin(email) if email else None
    if admin is None or admin.role != "admin" or payload.get("role") != "admin":
        raise Forbidden("Admin access required")
    return admin
