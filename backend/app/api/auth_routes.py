# backend/app/api/auth_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps_auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.core.identity import IdentityError, IdentityProvider, IdentitySession, get_identity_provider
from app.models.user import User
from app.services.accounts import (
    AccountValidationError,
    DuplicateEmailError,
    create_account_with_profile,
    is_valid_email,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[str] = None


class RefreshIn(BaseModel):
    refresh_token: Optional[str] = None


class SessionUserOut(BaseModel):
    id: str
    email: str
    name: str
    userType: str


class SessionOut(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int


class RegisterOut(BaseModel):
    success: bool = True
    message: str
    user: SessionUserOut


class LoginOut(BaseModel):
    success: bool = True
    message: str
    user: SessionUserOut
    session: SessionOut


class MeOut(BaseModel):
    success: bool = True
    user: SessionUserOut


def _session_user(user: User) -> SessionUserOut:
    return SessionUserOut(id=user.id, email=user.email, name=user.name, userType=user.user_type)


def _session_out(s: IdentitySession) -> SessionOut:
    return SessionOut(access_token=s.access_token, refresh_token=s.refresh_token, expires_in=s.expires_in)


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        user = create_account_with_profile(
            db,
            identity,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            user_type=payload.userType,
        )
    except AccountValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateEmailError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

    return RegisterOut(message="User registered successfully", user=_session_user(user))


@router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    email = (payload.email or "").strip()
    if not email or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required")
    if not is_valid_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    try:
        s = identity.sign_in(db, email, payload.password)
    except IdentityError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    user = db.get(User, s.identity.id)
    if not user:
        logger.error("identity %s has no users row", s.identity.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user information",
        )

    if payload.userType and user.user_type != payload.userType:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. This account is registered as {user.user_type}, not {payload.userType}.",
        )

    return LoginOut(message="Login successful", user=_session_user(user), session=_session_out(s))


@router.post("/refresh", response_model=LoginOut)
def refresh(
    payload: RefreshIn,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        s = identity.refresh(db, payload.refresh_token or "")
    except IdentityError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, s.identity.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    return LoginOut(message="Session refreshed", user=_session_user(user), session=_session_out(s))


@router.get("/me", response_model=MeOut)
def me(current_user: CurrentUser = Depends(get_current_user)):
    return MeOut(
        user=SessionUserOut(
            id=current_user.id,
            email=current_user.email,
            name=current_user.name,
            userType=current_user.user_type,
        )
    )
