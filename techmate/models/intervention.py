"""
Intervention model
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
import enum
from techmate.core.database import Base


class InterventionStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class InterventionPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Intervention(Base):
    __tablename__ = "interventions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    technician_id = Column(Uuid, ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True, index=True)
    machine_id = Column(Uuid, ForeignKey("machines.id", ondelete="SET NULL"), nullable=True, index=True)
    problem_description = Column(Text, nullable=True)
    audio_url = Column(String, nullable=True)
    ai_solution = Column(Text, nullable=True)
    status = Column(
        SQLEnum(InterventionStatus, name="intervention_status", native_enum=False,
                create_constraint=True, values_callable=_enum_values, length=50),
        nullable=False, default=InterventionStatus.PENDING, index=True
    )
    priority = Column(
        SQLEnum(InterventionPriority, name="intervention_priority", native_enum=False,
                create_constraint=True, values_callable=_enum_values, length=20),
        nullable=False, default=InterventionPriority.MEDIUM
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)  # set only on transition to resolved

    # Relationships
    machine = relationship("Machine", back_populates="interventions")
    technician = relationship("Technician", back_populates="interventions")
