# backend/app/api/users.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, Permission, require_permission
from app.core.database import get_db
from app.core.identity import IdentityError, IdentityProvider, get_identity_provider
from app.models.asset import Asset as AssetModel
from app.models.user import USER_TYPES, User as UserModel
from app.services.accounts import (
    AccountValidationError,
    DuplicateEmailError,
    create_account_with_profile,
    email_taken,
    is_valid_email,
    normalize_email,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------- SCHEMAS ----------

class User(BaseModel):
    id: str
    name: str
    email: str
    user_type: str
    department_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[str] = None
    department_id: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    user_type: Optional[str] = None
    department_id: Optional[int] = None


class UserList(BaseModel):
    success: bool = True
    users: List[User]


class UserOne(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: User


class Message(BaseModel):
    success: bool = True
    message: str

# ---------- ROUTES ----------

@router.get("/users", response_model=UserList)
def list_users(
    db: Session = Depends(get_db),
    _admin: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can view users")),
):
    rows = db.query(UserModel).order_by(UserModel.created_at.desc()).all()
    return UserList(users=rows)


@router.post("/users/create", response_model=UserOne, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
    admin: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can create users")),
):
    try:
        user = create_account_with_profile(
            db,
            identity,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            user_type=payload.userType,
            department_id=payload.department_id,
        )
    except AccountValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateEmailError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")
    except IntegrityError:
        # e.g. unknown department_id; the identity account was rolled back with it
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create user record")

    logger.info("user %s created by admin %s", user.id, admin.id)
    return UserOne(user=user)


@router.get("/users/{user_id}", response_model=UserOne)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    _admin: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can view user details")),
):
    user = db.get(UserModel, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserOne(user=user)


@router.put("/users/{user_id}", response_model=UserOne)
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
    admin: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can update users")),
):
    updates = {}
    if payload.name and payload.name.strip():
        updates["name"] = payload.name.strip()
    if payload.email and payload.email.strip():
        updates["email"] = normalize_email(payload.email)
    if payload.user_type:
        updates["user_type"] = payload.user_type
    if payload.department_id:
        updates["department_id"] = payload.department_id

    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    if "user_type" in updates and updates["user_type"] not in USER_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user type")
    if "email" in updates and not is_valid_email(updates["email"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    user = db.get(UserModel, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if "email" in updates and updates["email"] != user.email:
        if email_taken(db, identity, updates["email"], exclude_id=user.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")
        try:
            identity.update_email(db, user.id, updates["email"])
        except IdentityError:
            db.rollback()
            logger.exception("Error updating identity email for %s", user.id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update user email in authentication",
            )

    for k, v in updates.items():
        setattr(user, k, v)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Error updating user %s", user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update user")
    db.refresh(user)

    logger.info("user %s updated by admin %s (%s)", user.id, admin.id, ", ".join(sorted(updates)))
    return UserOne(message="User updated successfully", user=user)


@router.delete("/users/{user_id}", response_model=Message)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
    admin: CurrentUser = Depends(require_permission(Permission.ADMIN, "Only admins can delete users")),
):
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    user = db.get(UserModel, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if db.query(AssetModel.id).filter(AssetModel.created_by == user_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete user: they have assets assigned to them",
        )

    # profile row and identity account go together
    db.delete(user)
    db.flush()
    try:
        identity.delete_account(db, user_id)
    except IdentityError:
        logger.warning("user %s had no identity account", user_id)
    db.commit()

    logger.info("user %s deleted by admin %s", user_id, admin.id)
    return Message(message="User deleted successfully")
