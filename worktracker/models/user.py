"""User and profile model definitions."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field


class Currency(str, Enum):
    """Currencies earnings can be reported in."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"


class UserBase(BaseModel):
    """Base user fields."""

    email: EmailStr
    name: str


class UserCreate(UserBase):
    """User creation model with password."""

    password: str


class User(UserBase):
    """User model without password (for API responses)."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class UserInDB(User):
    """User model with hashed password (for database storage)."""

    hashed_password: str


class UserSettings(BaseModel):
    """Per-user preferences consumed by reports and the idle monitor."""

    currency: Currency = Currency.USD
    dark_mode: bool = False
    idle_minutes: int = Field(default=10, ge=1)


class ProfileUpdate(BaseModel):
    """Profile update model."""

    hourly_rate: float = Field(ge=0)
    settings: UserSettings


class UserProfile(BaseModel):
    """Earnings and preference profile for one user."""

    user_id: str
    hourly_rate: float = Field(default=0.0, ge=0)
    settings: UserSettings = Field(default_factory=UserSettings)
    updated_at: datetime | None = None
