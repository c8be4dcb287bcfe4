"""
Authentication for YourGrocer
Password hashing, JWT access tokens and the FastAPI dependencies that
resolve the calling user
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from pydantic import BaseModel

from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase, get_db
from grocer.domain.user import User
from grocer.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenPayload(BaseModel):
    """Claims carried by an access token"""
    user_id: int
    username: str
    is_vendor: bool = False
    jti: str
    exp: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored hash; malformed hashes never match"""
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash has an unexpected format")
        return False


def create_access_token(
    user: User,
    secret: str,
    expires_minutes: int = 60 * 24,
    now: Optional[datetime] = None
) -> str:
    """
    Issue a signed HS256 token for a user

    Claims: sub (user id), username, is_vendor, jti, iat, exp
    """
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "is_vendor": user.is_vendor,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_access_token(token: str, secret: str) -> TokenPayload:
    """
    Decode and validate an access token

    Raises:
        HTTPException 401 for expired, tampered or malformed tokens
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")

    try:
        return TokenPayload(
            user_id=int(claims["sub"]),
            username=claims["username"],
            is_vendor=claims.get("is_vendor", False),
            jti=claims["jti"],
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    except (KeyError, ValueError, TypeError):
        raise _unauthorized("Invalid token payload")


def _settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_token_payload(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: InMemoryDatabase = Depends(get_db)
) -> TokenPayload:
    """Dependency returning the validated, non-revoked token of the request"""
    if not credentials:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials, _settings(request).AUTH_SECRET)
    if payload.jti in db.revoked_tokens:
        raise _unauthorized("Token has been revoked")
    return payload


async def get_current_user(
    payload: TokenPayload = Depends(get_token_payload),
    db: InMemoryDatabase = Depends(get_db)
) -> User:
    """
    Dependency that resolves the authenticated user

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"message": f"Hello {user.name}"}
    """
    user = UserRepository(db).find_by_id(payload.user_id)
    if not user:
        raise _unauthorized("Not authenticated")
    return user


async def require_vendor(user: User = Depends(get_current_user)) -> User:
    """Dependency for vendor-only endpoints"""
    if not user.is_vendor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Vendor account required"
        )
    return user
