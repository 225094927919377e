from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.category import Category
from app.models.department import Department
from app.models.user import User


class Asset(Base):
    __tablename__ = "assets"

    __table_args__ = (
        # SAFETY CONSTRAINTS
        CheckConstraint("cost >= 0", name="ck_assets_cost_non_negative"),

        # PERFORMANCE INDEXES
        Index("ix_assets_created_by", "created_by"),
        Index("ix_assets_category_id", "category_id"),
        Index("ix_assets_department_id", "department_id"),
    )

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="RESTRICT"), nullable=False)

    date_purchased = Column(Date, nullable=False)
    cost = Column(Numeric(12, 2), nullable=False, default=0)

    # owner
    created_by = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship(Category, lazy="joined")
    department = relationship(Department, lazy="joined")
    owner = relationship(User, lazy="joined")
