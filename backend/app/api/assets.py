# backend/app/api/assets.py

import logging
import math
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, Permission, require_permission
from app.core.database import get_db
from app.models.asset import Asset as AssetModel
from app.services.asset_filters import filter_assets

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------- SCHEMAS ----------

class Asset(BaseModel):
    id: int
    name: str
    category: str
    department: str
    category_id: int
    department_id: int
    date_purchased: date
    cost: float
    created_by: str
    created_by_name: str


class AssetCreate(BaseModel):
    name: Optional[str] = None
    category_id: Optional[int] = None
    department_id: Optional[int] = None
    date_purchased: Optional[date] = None
    cost: Optional[float] = None


class AssetUpdate(BaseModel):
    name: Optional[str] = None
    category_id: Optional[int] = None
    department_id: Optional[int] = None
    date_purchased: Optional[date] = None
    cost: Optional[float] = None


class AssetList(BaseModel):
    success: bool = True
    assets: List[Asset]


class AssetOne(BaseModel):
    success: bool = True
    message: Optional[str] = None
    asset: Asset


class Message(BaseModel):
    success: bool = True
    message: str

# ---------- HELPERS ----------

def to_asset_out(a: AssetModel) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "category": a.category.name if a.category else "N/A",
        "department": a.department.name if a.department else "N/A",
        "category_id": a.category_id,
        "department_id": a.department_id,
        "date_purchased": a.date_purchased,
        "cost": float(a.cost or 0),
        "created_by": a.created_by,
        "created_by_name": a.owner.name if a.owner else "Unknown",
    }


# assets.cost is Numeric(12, 2)
MAX_COST = 10**10


def _check_cost(cost: float) -> Decimal:
    if not math.isfinite(cost) or cost < 0 or cost >= MAX_COST:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cost must be a non-negative number")
    return Decimal(str(cost))


def _get_or_404(db: Session, asset_id: int) -> AssetModel:
    a = db.get(AssetModel, asset_id)
    if not a:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return a

# ---------- ROUTES ----------

@router.get("/assets", response_model=AssetList)
def list_assets(
    search: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
):
    q = db.query(AssetModel).order_by(AssetModel.created_at.desc(), AssetModel.id.desc())

    # non-admins only ever see what they own
    if not user.is_admin:
        q = q.filter(AssetModel.created_by == user.id)

    rows = [to_asset_out(a) for a in q.all()]
    return AssetList(assets=filter_assets(rows, search=search, category=category, department=department))


@router.post("/assets", response_model=AssetOne, status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: AssetCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
):
    name = (payload.name or "").strip()
    if (
        not name
        or not payload.category_id
        or not payload.department_id
        or not payload.date_purchased
        or payload.cost is None
    ):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")

    a = AssetModel(
        name=name,
        category_id=payload.category_id,
        department_id=payload.department_id,
        date_purchased=payload.date_purchased,
        cost=_check_cost(payload.cost),
        created_by=user.id,
    )
    db.add(a)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error creating asset")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create asset")
    db.refresh(a)

    logger.info("asset %s created by %s", a.id, user.id)
    return AssetOne(asset=to_asset_out(a))


@router.get("/assets/{asset_id}", response_model=AssetOne)
def get_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
):
    a = _get_or_404(db, asset_id)
    if not user.is_admin and a.created_by != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only view your own assets")
    return AssetOne(asset=to_asset_out(a))


@router.put("/assets/{asset_id}", response_model=AssetOne)
def update_asset(
    asset_id: int,
    payload: AssetUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can update assets")),
):
    a = _get_or_404(db, asset_id)

    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in updates:
        updates["name"] = updates["name"].strip()
        if not updates["name"]:
            del updates["name"]
    if "cost" in updates:
        updates["cost"] = _check_cost(updates["cost"])

    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

    for k, v in updates.items():
        setattr(a, k, v)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error updating asset %s", asset_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update asset")

    db.refresh(a)

    logger.info("asset %s updated by %s", asset_id, user.id)
    return AssetOne(message="Asset updated successfully", asset=to_asset_out(a))


@router.delete("/assets/{asset_id}", response_model=Message)
def delete_asset(
    asset_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can delete assets")),
):
    a = _get_or_404(db, asset_id)
    db.delete(a)
    db.commit()

    logger.info("asset %s deleted by %s", asset_id, user.id)
    return Message(message="Asset deleted successfully")
