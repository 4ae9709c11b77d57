"""Project service - business logic for project management."""
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from worktracker.database import PROJECTS_COLLECTION
from worktracker.exceptions import NotFoundError, ValidationError
from worktracker.models.project import Project, ProjectCreate, ProjectUpdate
from worktracker.utils.clock import Clock, system_clock
from worktracker.utils.slug import generate_unique_slug, slugify


class ProjectService:
    """Service for handling project operations."""

    def __init__(self, db, clock: Clock = system_clock):
        """Initialize service with database connection."""
        self.db = db
        self.clock = clock
        self.projects = db[PROJECTS_COLLECTION]

    def _doc_to_project(self, doc: dict) -> Project:
        return Project(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            name=doc.get("name") or "General",
            color=doc.get("color") or "#0ea5e9",
            slug=doc["slug"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def _object_id(self, project_id: str) -> ObjectId:
        try:
            return ObjectId(project_id)
        except (InvalidId, TypeError):
            raise NotFoundError("Invalid project ID format")

    async def create_project(self, user_id: str, project_create: ProjectCreate) -> Project:
        """
        Create a new project.

        Raises:
            ValidationError: If the name is blank
        """
        name = project_create.name.strip()
        if not name:
            raise ValidationError("Project name is required.")

        slug = await generate_unique_slug(self.projects, slugify(name), user_id=user_id)
        now = self.clock.now()
        project_doc = {
            "user_id": user_id,
            "name": name,
            "color": project_create.color,
            "slug": slug,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.projects.insert_one(project_doc)
        project_doc["_id"] = result.inserted_id

        return self._doc_to_project(project_doc)

    async def list_projects(self, user_id: str) -> list[Project]:
        """List a user's projects sorted by name."""
        cursor = self.projects.find({"user_id": user_id})
        project_docs = await cursor.to_list(length=None)

        projects = [self._doc_to_project(doc) for doc in project_docs]
        return sorted(projects, key=lambda project: project.name.lower())

    async def update_project(
        self,
        user_id: str,
        project_id: str,
        project_update: ProjectUpdate,
    ) -> Project:
        """
        Rename or recolor a project. The slug is kept so entries stay linked.

        Raises:
            ValidationError: If the new name is blank
            NotFoundError: If project not found
        """
        update_doc = {"updated_at": self.clock.now()}

        if project_update.name is not None:
            name = project_update.name.strip()
            if not name:
                raise ValidationError("Project name is required.")
            update_doc["name"] = name
        if project_update.color is not None:
            update_doc["color"] = project_update.color

        updated_doc = await self.projects.find_one_and_update(
            {"_id": self._object_id(project_id), "user_id": user_id},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )
        if not updated_doc:
            raise NotFoundError("Project not found")

        return self._doc_to_project(updated_doc)

    async def delete_project(self, user_id: str, project_id: str) -> dict:
        """
        Delete a project. Its entries keep their denormalized project name.

        Raises:
            NotFoundError: If project not found
        """
        result = await self.projects.delete_one({
            "_id": self._object_id(project_id),
            "user_id": user_id,
        })
        if not result.deleted_count:
            raise NotFoundError("Project not found")

        return {"deleted_count": result.deleted_count}
