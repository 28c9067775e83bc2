"""
Machine and spare part models
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Integer, Numeric, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from techmate.core.database import Base
from techmate.core.config import settings


class Machine(Base):
    __tablename__ = "machines"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    model = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    manual_pdf_url = Column(String, nullable=True)
    specifications = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True, default=dict)  # {"Potência": "15 kW", "Peso": 1200}
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    parts = relationship("Part", back_populates="compatible_machine", passive_deletes=True)
    interventions = relationship("Intervention", back_populates="machine", passive_deletes=True)

    @property
    def display_name(self) -> str:
        return f"{self.model} - {self.location}" if self.location else self.model


class Part(Base):
    __tablename__ = "parts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    compatible_machine_id = Column(Uuid, ForeignKey("machines.id", ondelete="SET NULL"), nullable=True, index=True)
    min_stock_level = Column(Integer, nullable=True, default=5)
    unit_price = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    compatible_machine = relationship("Machine", back_populates="parts")

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity < (self.min_stock_level or settings.LOW_STOCK_DEFAULT)
