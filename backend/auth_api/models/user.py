from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from auth_api.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    auth_id = Column(String(36), ForeignKey("auths.id"), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    phone_number = Column(String(64), nullable=True)
    avatar = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    auth = relationship("Auth", back_populates="user")
