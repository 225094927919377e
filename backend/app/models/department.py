from sqlalchemy import Column, DateTime, Integer, String, func
from app.core.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
