"""
User API Endpoints
Current user, profile updates and account creation without login
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from grocer.api.auth import register_user
from grocer.core.auth import get_current_user
from grocer.core.database import InMemoryDatabase, get_db
from grocer.domain.user import User, UserCreate, UserPublic, UserUpdate
from grocer.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/user")
async def get_user(user: User = Depends(get_current_user)):
    return {
        "status": "success",
        "data": UserPublic.model_validate(user).model_dump(mode="json")
    }


@router.put("/user/profile")
async def update_profile(
    profile: UserUpdate,
    user: User = Depends(get_current_user),
    db: InMemoryDatabase = Depends(get_db)
):
    """
    Update name, email, phone or address of the current user

    Only the fields present in the body change.
    """
    repo = UserRepository(db)

    if profile.email is not None:
        owner = repo.find_by_email(str(profile.email))
        if owner and owner.id != user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    updated = repo.update(user.id, profile)
    logger.info(f"User {user.id} updated profile fields: {sorted(profile.model_fields_set)}")

    return {
        "status": "success",
        "data": UserPublic.model_validate(updated).model_dump(mode="json")
    }


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, db: InMemoryDatabase = Depends(get_db)):
    """Create a user without logging in; duplicate username or email is a 409"""
    user = register_user(UserRepository(db), user_data, status.HTTP_409_CONFLICT)
    return {
        "status": "success",
        "data": UserPublic.model_validate(user).model_dump(mode="json")
    }
