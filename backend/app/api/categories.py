# backend/app/api/categories.py

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
from app.models.category import Category as CategoryModel

logger = logging.getLogger(__name__)

router = APIRouter()


class Category(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryIn(BaseModel):
    name: Optional[str] = None


class CategoryList(BaseModel):
    success: bool = True
    categories: List[Category]


class CategoryOne(BaseModel):
    success: bool = True
    message: Optional[str] = None
    category: Category


class Message(BaseModel):
    success: bool = True
    message: str


def _clean_name(payload: CategoryIn) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name is required")
    return name


def _get_or_404(db: Session, category_id: int) -> CategoryModel:
    c = db.get(CategoryModel, category_id)
    if not c:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return c


@router.get("/categories", response_model=CategoryList)
def list_categories(
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
):
    return CategoryList(categories=db.query(CategoryModel).order_by(CategoryModel.name.asc()).all())


@router.post("/categories", response_model=CategoryList, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can create categories")),
):
    c = CategoryModel(name=_clean_name(payload))
    db.add(c)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error creating category")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create category")
    db.refresh(c)

    logger.info("category %s created by %s", c.id, user.id)
    return CategoryList(categories=[c])


@router.get("/categories/{category_id}", response_model=CategoryOne)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Unauthorized")),
):
    return CategoryOne(category=_get_or_404(db, category_id))


@router.put("/categories/{category_id}", response_model=CategoryOne)
def update_category(
    category_id: int,
    payload: CategoryIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can update categories")),
):
    name = _clean_name(payload)
    c = _get_or_404(db, category_id)
    c.name = name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error updating category %s", category_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update category")
    db.refresh(c)

    logger.info("category %s renamed by %s", c.id, user.id)
    return CategoryOne(message="Category updated successfully", category=c)


@router.delete("/categories/{category_id}", response_model=Message)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can delete categories")),
):
    c = _get_or_404(db, category_id)

    if db.query(AssetModel.id).filter(AssetModel.category_id == category_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete category: it is being used by one or more assets",
        )

    db.delete(c)
    db.commit()

    logger.info("category %s deleted by %s", category_id, user.id)
    return Message(message="Category deleted successfully")
