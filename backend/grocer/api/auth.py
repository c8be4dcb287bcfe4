"""
Authentication API endpoints for YourGrocer
- Registration
- Customer and vendor login
- Logout (token revocation)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from grocer.api.deps import get_cart_service, get_settings
from grocer.core.auth import (
    TokenPayload,
    create_access_token,
    get_token_payload,
    hash_password,
    verify_password,
)
from grocer.core.config import Settings
from grocer.core.database import InMemoryDatabase, get_db
from grocer.domain.user import User, UserCreate, UserPublic
from grocer.repositories.user_repository import UserRepository
from grocer.services.cart_service import CartService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic


class LogoutResponse(BaseModel):
    status: str = "success"
    message: str


# =============================================================================
# Helpers
# =============================================================================

def _issue(user: User, settings: Settings) -> AuthResponse:
    token = create_access_token(user, settings.AUTH_SECRET, settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return AuthResponse(access_token=token, user=UserPublic.model_validate(user))


def _authenticate(repo: UserRepository, credentials: LoginRequest) -> User:
    user = repo.find_by_username(credentials.username)
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login attempt for username '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )
    return user


def register_user(repo: UserRepository, user_data: UserCreate, duplicate_status: int) -> User:
    """Create a user after uniqueness checks; duplicates raise `duplicate_status`"""
    if repo.find_by_username(user_data.username):
        raise HTTPException(status_code=duplicate_status, detail="Username already exists")
    if repo.find_by_email(str(user_data.email)):
        raise HTTPException(status_code=duplicate_status, detail="Email already registered")

    user = repo.create(user_data, hash_password(user_data.password))
    logger.info(f"Registered {'vendor' if user.is_vendor else 'customer'} '{user.username}' (id={user.id})")
    return user


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: InMemoryDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Create an account and log it in"""
    user = register_user(UserRepository(db), user_data, status.HTTP_400_BAD_REQUEST)
    return _issue(user, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    db: InMemoryDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    user = _authenticate(UserRepository(db), credentials)
    logger.info(f"User '{user.username}' logged in")
    return _issue(user, settings)


@router.post("/vendor/login", response_model=AuthResponse)
async def vendor_login(
    credentials: LoginRequest,
    db: InMemoryDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Login for store owners; customer accounts are refused with 403"""
    user = _authenticate(UserRepository(db), credentials)
    if not user.is_vendor:
        logger.warning(f"Customer '{user.username}' tried the vendor login")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This login is for vendors only. Please use the customer login."
        )
    logger.info(f"Vendor '{user.username}' logged in")
    return _issue(user, settings)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    payload: TokenPayload = Depends(get_token_payload),
    db: InMemoryDatabase = Depends(get_db),
    cart_service: CartService = Depends(get_cart_service)
):
    """Revoke the presented token and drop the user's cart"""
    db.revoked_tokens.add(payload.jti)
    cart_service.discard(payload.user_id)
    logger.info(f"User '{payload.username}' logged out")
    return LogoutResponse(message="Logged out successfully")
