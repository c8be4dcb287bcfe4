"""
User Domain Models

Customers and vendors share one user record; vendors are the users that own
stores.
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional
from datetime import datetime


class User(BaseModel):
    """
    User domain model - a customer or a vendor

    Fields:
        id: Internal user ID
        username: Unique login name
        password_hash: passlib hash, never serialised
        name: Display name
        email: Unique email address
        address: Default delivery address (optional)
        phone: Contact phone (optional)
        is_vendor: True for store-owning users
        created_at: Registration timestamp
    """

    id: int = Field(..., description="Internal user ID")
    username: str = Field(..., description="Unique username")
    password_hash: str = Field(..., description="Password hash", exclude=True)
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    address: Optional[str] = Field(None, description="Default delivery address")
    phone: Optional[str] = Field(None, description="Phone number")
    is_vendor: bool = Field(False, description="Whether the user owns stores")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        """Public representation (no password hash)"""
        return self.model_dump(mode="json")


class UserCreate(BaseModel):
    """Schema for registering a new user"""
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: EmailStr
    address: Optional[str] = None
    phone: Optional[str] = None
    is_vendor: bool = False

    @field_validator("username", "name")
    @classmethod
    def strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UserUpdate(BaseModel):
    """Schema for profile updates"""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class UserPublic(BaseModel):
    """User as returned by the API"""
    id: int
    username: str
    name: str
    email: str
    address: Optional[str] = None
    phone: Optional[str] = None
    is_vendor: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
