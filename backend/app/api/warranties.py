# backend/app/api/warranties.py

import logging
import secrets
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps_auth import (
    WARRANTY_CENTRE_SCOPE,
    CurrentUser,
    Permission,
    require_permission,
    require_warranty_viewer,
)
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.identity import IdentityProvider, get_identity_provider
from app.models.asset import Asset as AssetModel
from app.services.warranty import compute_warranty_fields, search_devices, summarize
from app.services.warranty_client import (
    WarrantyServiceClient,
    WarrantyServiceError,
    WarrantyServiceNotConfigured,
    get_warranty_client,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_WARRANTY_MONTHS = 12

# ---------- SCHEMAS ----------

class WarrantyRegisterIn(BaseModel):
    asset_id: Optional[int] = None
    serial_number: Optional[str] = None
    warranty_period_months: Optional[int] = DEFAULT_WARRANTY_MONTHS
    owner_phone: Optional[str] = ""
    manufacturer: Optional[str] = None


class WarrantyRegisterOut(BaseModel):
    success: bool = True
    message: str
    data: Any = None


class WarrantyCentreLoginIn(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class WarrantyCentreLoginOut(BaseModel):
    success: bool = True
    message: str
    access_token: str
    token_type: str = "bearer"
    username: str


class WarrantySummary(BaseModel):
    total: int
    active: int
    expiring_soon: int
    expired: int


class DeviceList(BaseModel):
    success: bool = True
    devices: List[dict]
    count: int
    summary: WarrantySummary

# ---------- HELPERS ----------

def build_registration_payload(
    asset: AssetModel,
    payload: WarrantyRegisterIn,
    now: Optional[datetime] = None,
) -> dict:
    now = now or datetime.now(timezone.utc)
    category = asset.category.name if asset.category else "N/A"
    department = asset.department.name if asset.department else "N/A"
    serial = (payload.serial_number or "").strip() or str(asset.id)

    return {
        "asset_id": asset.id,
        "product_name": asset.name,
        "manufacturer": (payload.manufacturer or "").strip() or category,
        "category": category,
        "department": department,
        "purchase_date": asset.date_purchased.isoformat(),
        "cost": float(asset.cost or 0),
        "owner_name": asset.owner.name if asset.owner else "Unknown",
        "owner_email": asset.owner.email if asset.owner else "Unknown",
        "owner_phone": payload.owner_phone or "",
        "serial_number": serial,
        "warranty_period_months": payload.warranty_period_months or DEFAULT_WARRANTY_MONTHS,
        "registration_date": now.isoformat(),
    }

# ---------- ROUTES ----------

@router.post("/warranties/register", response_model=WarrantyRegisterOut)
def register_warranty(
    payload: WarrantyRegisterIn,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_permission(Permission.AUTHENTICATED)),
    client: WarrantyServiceClient = Depends(get_warranty_client),
):
    if not payload.asset_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Asset ID is required")
    if payload.warranty_period_months is not None and payload.warranty_period_months <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Warranty period must be a positive number of months",
        )

    asset = db.get(AssetModel, payload.asset_id)
    if not asset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")

    # ownership check happens before anything leaves this process
    if asset.created_by != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only register warranty for your own assets",
        )

    body = build_registration_payload(asset, payload)

    try:
        data = client.register_device(body)
    except WarrantyServiceNotConfigured:
        logger.error("warranty service URL not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Warranty service temporarily unavailable",
        )
    except WarrantyServiceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register warranty with warranty service",
        )

    logger.info("warranty registered for asset %s by %s", asset.id, user.id)
    return WarrantyRegisterOut(message="Warranty registered successfully", data=data)


@router.post("/warranties/login", response_model=WarrantyCentreLoginOut)
def warranty_centre_login(
    payload: WarrantyCentreLoginIn,
    settings: Settings = Depends(get_settings),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    if not settings.warranty_centre_username or not settings.warranty_centre_password:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Warranty centre login is not configured",
        )

    username = (payload.username or "").strip()
    password = payload.password or ""
    if not username or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please fill in all fields")

    ok_user = secrets.compare_digest(username, settings.warranty_centre_username)
    ok_pass = secrets.compare_digest(password, settings.warranty_centre_password)
    if not (ok_user and ok_pass):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")

    token = identity.issue_service_token(username, WARRANTY_CENTRE_SCOPE)
    return WarrantyCentreLoginOut(message="Login successful", access_token=token, username=username)


@router.get("/warranties/devices", response_model=DeviceList)
def list_warranty_devices(
    search: Optional[str] = None,
    _viewer: str = Depends(require_warranty_viewer),
    client: WarrantyServiceClient = Depends(get_warranty_client),
):
    try:
        result = client.list_devices()
    except WarrantyServiceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch warranty devices",
        )

    now = datetime.now(timezone.utc)
    try:
        devices = [{**d, **compute_warranty_fields(d, now)} for d in result["devices"]]
    except (AttributeError, TypeError, ValueError):
        logger.exception("warranty service returned an unreadable device record")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch warranty devices",
        )

    # count follows the filtered list; summary.total covers every device
    matches = search_devices(devices, search)
    return DeviceList(
        devices=matches,
        count=len(matches),
        summary=WarrantySummary(**summarize(devices, now)),
    )
