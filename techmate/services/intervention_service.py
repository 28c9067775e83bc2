"""
Intervention reads and dashboard counters
"""
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_
from typing import Optional, List, Dict, Any
import uuid

from techmate.core.config import settings
from techmate.models.intervention import Intervention, InterventionStatus
from techmate.models.machine import Machine, Part
from techmate.models.technician import Technician

OPEN_STATUSES = [InterventionStatus.PENDING, InterventionStatus.IN_PROGRESS]


def list_interventions(
    db: Session,
    status: Optional[InterventionStatus] = None,
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0
) -> List[Intervention]:
    """Newest first, optionally filtered by status and free-text search"""
    query = db.query(Intervention).options(
        joinedload(Intervention.machine),
        joinedload(Intervention.technician)
    )

    if status:
        query = query.filter(Intervention.status == status)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.outerjoin(Machine, Intervention.machine_id == Machine.id).outerjoin(
            Technician, Intervention.technician_id == Technician.id
        ).filter(
            or_(
                Intervention.problem_description.ilike(pattern),
                Machine.model.ilike(pattern),
                Technician.name.ilike(pattern)
            )
        )

    return query.order_by(Intervention.created_at.desc()).offset(offset).limit(limit).all()


def get_intervention(db: Session, intervention_id: uuid.UUID) -> Optional[Intervention]:
    return db.query(Intervention).options(
        joinedload(Intervention.machine),
        joinedload(Intervention.technician)
    ).filter(Intervention.id == intervention_id).first()


def count_low_stock_parts(db: Session) -> int:
    # a minimum of 0 counts as unset
    threshold = func.coalesce(func.nullif(Part.min_stock_level, 0), settings.LOW_STOCK_DEFAULT)
    return db.query(func.count(Part.id)).filter(Part.stock_quantity < threshold).scalar() or 0


def get_dashboard_stats(db: Session, recent_limit: int = 5) -> Dict[str, Any]:
    open_interventions = db.query(func.count(Intervention.id)).filter(
        Intervention.status.in_(OPEN_STATUSES)
    ).scalar() or 0

    active_technicians = db.query(func.count(Technician.id)).filter(
        Technician.is_active.is_(True)
    ).scalar() or 0

    recent = db.query(Intervention).options(
        joinedload(Intervention.machine),
        joinedload(Intervention.technician)
    ).order_by(Intervention.created_at.desc()).limit(recent_limit).all()

    return {
        "open_interventions": open_interventions,
        "low_stock_parts": count_low_stock_parts(db),
        "active_technicians": active_technicians,
        "recent_interventions": recent,
    }
