"""
Reference data used around intake: machines, technicians, profiles
"""
from sqlalchemy.orm import Session
from typing import Optional, List, Dict, Any
import uuid

from techmate.models.machine import Machine, Part
from techmate.models.technician import Technician
from techmate.models.intervention import Intervention
from techmate.models.profile import Profile


def list_active_machines(db: Session) -> List[Machine]:
    """Machines offered in the intake picker"""
    return db.query(Machine).filter(Machine.is_active.is_(True)).order_by(Machine.model).all()


def list_active_technicians(db: Session) -> List[Technician]:
    """Technicians offered in the intake picker"""
    return db.query(Technician).filter(Technician.is_active.is_(True)).order_by(Technician.name).all()


def get_active_machine(db: Session, machine_id: uuid.UUID) -> Optional[Machine]:
    return db.query(Machine).filter(Machine.id == machine_id, Machine.is_active.is_(True)).first()


def get_active_technician(db: Session, technician_id: uuid.UUID) -> Optional[Technician]:
    return db.query(Technician).filter(
        Technician.id == technician_id,
        Technician.is_active.is_(True)
    ).first()


def normalize_specifications(specifications: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Keep only string or number values, in stored order

    Anything else (nested objects, lists, null) is rendered as text.
    """
    result = {}
    for key, value in (specifications or {}).items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            value = "" if value is None else str(value)
        result[str(key)] = value
    return result


def get_machine_detail(db: Session, machine_id: uuid.UUID, recent_limit: int = 5) -> Optional[Dict[str, Any]]:
    """Machine with its compatible parts and latest interventions"""
    machine = db.query(Machine).filter(Machine.id == machine_id).first()
    if not machine:
        return None

    parts = db.query(Part).filter(Part.compatible_machine_id == machine_id).order_by(Part.name).all()
    interventions = db.query(Intervention).filter(
        Intervention.machine_id == machine_id
    ).order_by(Intervention.created_at.desc()).limit(recent_limit).all()

    return {
        "machine": machine,
        "specifications": normalize_specifications(machine.specifications),
        "parts": parts,
        "recent_interventions": interventions,
    }


def get_or_create_profile(
    db: Session,
    user_id: uuid.UUID,
    email: str,
    name: Optional[str] = None
) -> Profile:
    """Profile for an authenticated user, created on first sight"""
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        profile = Profile(
            user_id=user_id,
            email=email,
            name=name or email.split("@")[0]
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile
