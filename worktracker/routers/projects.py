"""Project router - API endpoints for project management."""
from fastapi import APIRouter, Depends, status

from worktracker.database import get_database
from worktracker.models.project import Project, ProjectCreate, ProjectUpdate
from worktracker.routers.auth import get_current_user_id
from worktracker.routers.errors import to_http_exception
from worktracker.services.project_service import ProjectService
from worktracker.utils.clock import get_clock


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Create a new project."""
    service = ProjectService(db, clock)

    try:
        return await service.create_project(user_id=user_id, project_create=project)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[Project])
async def list_projects(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List projects for the current user, sorted by name."""
    return await ProjectService(db).list_projects(user_id=user_id)


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Rename or recolor a project."""
    service = ProjectService(db, clock)

    try:
        return await service.update_project(
            user_id=user_id,
            project_id=project_id,
            project_update=project_update,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Delete a project. Existing entries keep their project name."""
    try:
        return await ProjectService(db).delete_project(user_id=user_id, project_id=project_id)
    except ValueError as e:
        raise to_http_exception(e)
