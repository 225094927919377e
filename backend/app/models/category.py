from sqlalchemy import Column, DateTime, Integer, String, func
from app.core.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
