# backend/app/api/deps_auth.py

import enum
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.identity import IdentityProvider, get_identity_provider
from app.models.user import User as UserModel

WARRANTY_CENTRE_SCOPE = "warranty_centre"

# auto_error=False so a missing header is a 401 (not FastAPI's default 403)
bearer_scheme = HTTPBearer(auto_error=False)


class Permission(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class CurrentUser(BaseModel):
    id: str
    email: str
    name: str
    user_type: str  # "admin" | "user"

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"


def check_permission(user: CurrentUser, permission: Permission) -> bool:
    if permission is Permission.ADMIN:
        return user.is_admin
    return True


def _unauthenticated(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise _unauthenticated()
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> CurrentUser:
    account = identity.resolve_token(db, token)
    if not account:
        raise _unauthenticated()

    user = db.get(UserModel, account.id)
    if not user:
        raise _unauthenticated()

    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.name,
        user_type=user.user_type,
    )


def require_permission(permission: Permission, detail: str = "Forbidden"):
    def _checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not check_permission(user, permission):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return _checker


def require_warranty_viewer(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> str:
    """Warranty centre operator, or an admin user. Returns the principal name."""
    operator = identity.resolve_service_token(token, WARRANTY_CENTRE_SCOPE)
    if operator:
        return operator

    account = identity.resolve_token(db, token)
    if not account:
        raise _unauthenticated()

    user = db.get(UserModel, account.id)
    if not user:
        raise _unauthenticated()
    if user.user_type != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Warranty centre access required")
    return user.email
