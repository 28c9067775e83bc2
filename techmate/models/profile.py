"""
User profile model
"""
from sqlalchemy import Column, String, DateTime, Uuid
from datetime import datetime
import uuid
from techmate.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, unique=True, index=True)  # auth provider user id
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
