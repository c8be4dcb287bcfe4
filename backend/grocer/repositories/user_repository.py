"""
User Repository - Data Access Layer for Users
"""
from typing import Optional

from grocer.core.clock import utc_now
from grocer.domain.user import User, UserCreate, UserUpdate
from grocer.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for customers and vendors"""

    table_name = "users"
    model = User

    def find_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive username lookup"""
        for user in self.rows.values():
            if user.username == username:
                return user.model_copy(deep=True)
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup"""
        needle = email.lower()
        for user in self.rows.values():
            if user.email.lower() == needle:
                return user.model_copy(deep=True)
        return None

    def create(self, user_data: UserCreate, password_hash: str) -> User:
        """
        Insert a user

        Args:
            user_data: Validated registration payload (plain password ignored)
            password_hash: Hash produced by the auth module

        Returns:
            The stored user
        """
        return self._insert(
            username=user_data.username,
            password_hash=password_hash,
            name=user_data.name,
            email=str(user_data.email),
            address=user_data.address or None,
            phone=user_data.phone or None,
            is_vendor=user_data.is_vendor,
            created_at=utc_now(),
        )

    def update(self, user_id: int, user_data: UserUpdate) -> Optional[User]:
        changes = user_data.model_dump(exclude_unset=True)
        if "email" in changes and changes["email"] is not None:
            changes["email"] = str(changes["email"])
        return self._update(user_id, changes)
