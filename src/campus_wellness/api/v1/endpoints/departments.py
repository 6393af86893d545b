# src/campus_wellness/api/v1/endpoints/departments.py
"""Department directory endpoints."""

from fastapi import APIRouter, Query, status

from campus_wellness.models import Department
from campus_wellness.schemas.department import (
    DepartmentAdminResponse,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
)
from campus_wellness.services.directory import DirectoryService

from ..dependencies import AccessDep, FreshAccessDep, SessionDep

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("/", response_model=list[DepartmentResponse])
async def list_departments(
    db: SessionDep,
    ctx: AccessDep,
    include_inactive: bool = Query(False, description="Admins only"),
) -> list[Department]:
    """List departments students can address complaints to."""
    return DirectoryService(db).list_departments(ctx, include_inactive=include_inactive)


@router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(department_id: int, db: SessionDep, ctx: AccessDep) -> Department:
    """Get a department."""
    return DirectoryService(db).get_department(department_id)


@router.post("/", response_model=DepartmentAdminResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    department_data: DepartmentCreate,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> Department:
    """Create a department."""
    return DirectoryService(db).create_department(department_data, ctx)


@router.patch("/{department_id}", response_model=DepartmentAdminResponse)
async def update_department(
    department_id: int,
    changes: DepartmentUpdate,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> Department:
    """Update a department, including reassigning its head."""
    return DirectoryService(db).update_department(department_id, changes, ctx)


@router.delete("/{department_id}", response_model=DepartmentAdminResponse)
async def deactivate_department(
    department_id: int,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> Department:
    """Deactivate a department. Its complaints and history are kept."""
    return DirectoryService(db).deactivate_department(department_id, ctx)
