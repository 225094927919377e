import logging
import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.identity import IdentityError, IdentityProvider
from app.models.user import USER_TYPES, User

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


class AccountValidationError(ValueError):
    pass


class DuplicateEmailError(Exception):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def validate_new_account(name: Optional[str], email: Optional[str], password: Optional[str], user_type: Optional[str]) -> None:
    if not (name or "").strip() or not (email or "").strip() or not password or not user_type:
        raise AccountValidationError("Missing required fields")
    if not is_valid_email(email.strip()):
        raise AccountValidationError("Invalid email format")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AccountValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if user_type not in USER_TYPES:
        raise AccountValidationError("Invalid user type")


def email_taken(db: Session, identity: IdentityProvider, email: str, exclude_id: Optional[str] = None) -> bool:
    q = db.query(User).filter(User.email == normalize_email(email))
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        return True
    existing = identity.find_by_email(db, email)
    return existing is not None and existing.id != exclude_id


def create_account_with_profile(
    db: Session,
    identity: IdentityProvider,
    *,
    name: str,
    email: str,
    password: str,
    user_type: str,
    department_id: Optional[int] = None,
) -> User:
    """Create the identity account and its ``users`` row in one transaction.

    Either both rows are committed or neither is: a failure while inserting the
    profile rolls back the identity account as well.
    """
    validate_new_account(name, email, password, user_type)

    email = normalize_email(email)
    name = name.strip()

    if email_taken(db, identity, email):
        raise DuplicateEmailError("User with this email already exists")

    try:
        account = identity.create_account(
            db,
            email,
            password,
            metadata={"name": name, "user_type": user_type},
        )
        user = User(
            id=account.id,
            email=email,
            name=name,
            user_type=user_type,
            department_id=department_id,
        )
        db.add(user)
        db.commit()
    except IdentityError as e:
        db.rollback()
        raise DuplicateEmailError(str(e)) from e
    except SQLAlchemyError:
        db.rollback()
        logger.exception("account creation rolled back for %s", email)
        raise

    db.refresh(user)
    logger.info("account created: %s (%s)", user.id, user.user_type)
    return user
