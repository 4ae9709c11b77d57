"""Project model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

PROJECT_COLOR_PRESETS = [
    "#f97316",
    "#16a34a",
    "#0ea5e9",
    "#eab308",
    "#ef4444",
    "#6366f1",
]


class ProjectBase(BaseModel):
    """Base project fields."""

    name: str
    color: str = "#0ea5e9"


class ProjectCreate(ProjectBase):
    """Project creation model."""

    pass


class ProjectUpdate(BaseModel):
    """Project update model - all fields optional."""

    name: Optional[str] = None
    color: Optional[str] = None


class Project(ProjectBase):
    """Full project model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    slug: str
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
