# backend/app/api/departments.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, Permission, require_permission
from app.core.database import get_db
from app.models.asset import Asset as AssetModel
from app.models.department import Department as DepartmentModel
from app.models.user import User as UserModel

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------- SCHEMAS ----------

class Department(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DepartmentIn(BaseModel):
    name: Optional[str] = None


class DepartmentList(BaseModel):
    success: bool = True
    departments: List[Department]


class DepartmentOne(BaseModel):
    success: bool = True
    message: Optional[str] = None
    department: Department


class Message(BaseModel):
    success: bool = True
    message: str

# ---------- HELPERS ----------

def _clean_name(payload: DepartmentIn) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department name is required")
    return name


def _get_or_404(db: Session, department_id: int) -> DepartmentModel:
    d = db.get(DepartmentModel, department_id)
    if not d:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return d

# ---------- ROUTES ----------

@router.get("/departments", response_model=DepartmentList)
def list_departments(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
):
    rows = db.query(DepartmentModel).order_by(DepartmentModel.name.asc()).all()
    return DepartmentList(departments=rows)


@router.post("/departments", response_model=DepartmentList, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can create departments")),
):
    d = DepartmentModel(name=_clean_name(payload))
    db.add(d)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error creating department")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create department")
    db.refresh(d)

    logger.info("department %s created by %s", d.id, user.id)
    return DepartmentList(departments=[d])


@router.get("/departments/{department_id}", response_model=DepartmentOne)
def get_department(
    department_id: int,
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Unauthorized")),
):
    return DepartmentOne(department=_get_or_404(db, department_id))


@router.put("/departments/{department_id}", response_model=DepartmentOne)
def update_department(
    department_id: int,
    payload: DepartmentIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can update departments")),
):
    name = _clean_name(payload)
    d = _get_or_404(db, department_id)
    d.name = name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error updating department %s", department_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update department")
    db.refresh(d)

    logger.info("department %s renamed by %s", d.id, user.id)
    return DepartmentOne(message="Department updated successfully", department=d)


@router.delete("/departments/{department_id}", response_model=Message)
def delete_department(
    department_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can delete departments")),
):
    d = _get_or_404(db, department_id)

    # both lookups must come back empty before anything is deleted
    has_users = db.query(UserModel.id).filter(UserModel.department_id == department_id).first()
    has_assets = db.query(AssetModel.id).filter(AssetModel.department_id == department_id).first()

    if has_users:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete department: it is assigned to one or more users",
        )
    if has_assets:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete department: it is assigned to one or more assets",
        )

    db.delete(d)
    db.commit()

    logger.info("department %s deleted by %s", department_id, user.id)
    return Message(message="Department deleted successfully")
