from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from app.core.database import Base
from app.models import auth_identity, department  # noqa: F401

USER_TYPES = ("admin", "user")


class User(Base):
    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint("user_type IN ('admin', 'user')", name="ck_users_user_type"),
        Index("idx_users_email", "email"),
        Index("idx_users_user_type", "user_type"),
    )

    # same value as the identity provider's subject id
    id = Column(
        String(36),
        ForeignKey("auth_identities.id", ondelete="CASCADE"),
        primary_key=True,
    )

    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)

    # "admin" | "user"
    user_type = Column(String, nullable=False, default="user")

    department_id = Column(
        Integer,
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=True,
    )

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
