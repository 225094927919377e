from sqlalchemy import JSON, Column, DateTime, String, func
from app.core.database import Base


class AuthIdentity(Base):
    """Account record owned by the identity provider, keyed by subject id."""

    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True)

    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # name / user_type as supplied at sign-up
    user_metadata = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
