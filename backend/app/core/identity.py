# backend/app/core/identity.py
"""Identity provider.

Owns accounts (``auth_identities``), password verification and bearer-token
issuance/resolution. API handlers talk to it only through ``IdentityProvider``
and never touch password hashes or token claims themselves.

Account writes are added to the caller's session and flushed but never
committed, so callers can bundle them with their own rows in one transaction.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core import security
from app.models.auth_identity import AuthIdentity

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised when the identity provider refuses an operation."""


@dataclass
class IdentitySession:
    access_token: str
    refresh_token: str
    expires_in: int
    identity: AuthIdentity


class IdentityProvider:
    def __init__(
        self,
        access_token_minutes: int = security.ACCESS_TOKEN_EXPIRE_MINUTES,
    ):
        self.access_token_minutes = access_token_minutes

    # ---------- accounts ----------

    def find_by_email(self, db: Session, email: str) -> Optional[AuthIdentity]:
        return (
            db.query(AuthIdentity)
            .filter(func.lower(AuthIdentity.email) == email.strip().lower())
            .first()
        )

    def create_account(
        self,
        db: Session,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuthIdentity:
        email = email.strip().lower()
        if self.find_by_email(db, email):
            raise IdentityError("A user with this email address has already been registered")

        identity = AuthIdentity(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=security.hash_password(password),
            user_metadata=dict(metadata or {}),
        )
        db.add(identity)
        db.flush()
        logger.info("identity created: %s", identity.id)
        return identity

    def update_email(self, db: Session, subject_id: str, email: str) -> AuthIdentity:
        identity = db.get(AuthIdentity, subject_id)
        if not identity:
            raise IdentityError("Identity not found")
        identity.email = email.strip().lower()
        db.flush()
        return identity

    def delete_account(self, db: Session, subject_id: str) -> None:
        identity = db.get(AuthIdentity, subject_id)
        if not identity:
            raise IdentityError("Identity not found")
        db.delete(identity)
        db.flush()
        logger.info("identity deleted: %s", subject_id)

    # ---------- sessions ----------

    def _issue(self, identity: AuthIdentity) -> IdentitySession:
        claims = {"sub": identity.id}
        return IdentitySession(
            access_token=security.create_access_token(claims),
            refresh_token=security.create_refresh_token(claims),
            expires_in=self.access_token_minutes * 60,
            identity=identity,
        )

    def sign_in(self, db: Session, email: str, password: str) -> IdentitySession:
        identity = self.find_by_email(db, email or "")
        if not identity or not security.verify_password(password, identity.password_hash):
            raise IdentityError("Invalid login credentials")
        return self._issue(identity)

    def refresh(self, db: Session, refresh_token: str) -> IdentitySession:
        identity = self._resolve(db, refresh_token, "refresh")
        if not identity:
            raise IdentityError("Invalid refresh token")
        return self._issue(identity)

    def resolve_token(self, db: Session, token: str) -> Optional[AuthIdentity]:
        """Resolve an access token to its identity, or None (fail closed)."""
        return self._resolve(db, token, "access")

    def _resolve(self, db: Session, token: str, token_type: str) -> Optional[AuthIdentity]:
        if not token or not isinstance(token, str):
            return None

        try:
            payload = security.decode_token(token)
        except ValueError:
            return None

        if payload.get("type") != token_type or payload.get("scope"):
            return None

        sub = payload.get("sub")
        if not sub:
            return None

        return db.get(AuthIdentity, str(sub))

    # ---------- service principals ----------

    def issue_service_token(self, subject: str, scope: str) -> str:
        return security.create_access_token({"sub": subject, "scope": scope})

    def resolve_service_token(self, token: str, scope: str) -> Optional[str]:
        try:
            payload = security.decode_token(token)
        except ValueError:
            return None
        if payload.get("type") != "access" or payload.get("scope") != scope:
            return None
        return payload.get("sub")


_provider = IdentityProvider()


def get_identity_provider() -> IdentityProvider:
    return _provider
