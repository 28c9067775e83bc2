"""
Intervention lifecycle - status transitions and resolution timestamp
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techmate.core.config import settings
from techmate.core.errors import InvalidTransitionError, NotFoundError, PersistenceError
from techmate.models.intervention import Intervention, InterventionStatus

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    InterventionStatus.PENDING: {InterventionStatus.IN_PROGRESS, InterventionStatus.CANCELLED},
    InterventionStatus.IN_PROGRESS: {InterventionStatus.RESOLVED, InterventionStatus.CANCELLED},
    InterventionStatus.RESOLVED: set(),
    InterventionStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def is_allowed_transition(current: InterventionStatus, target: InterventionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def build_status_patch(
    target: InterventionStatus,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Fields to write for a status change

    resolved_at is only ever written when the target is resolved; it is
    never cleared.
    """
    now = now or datetime.utcnow()
    patch: Dict[str, Any] = {"status": target, "updated_at": now}
    if target == InterventionStatus.RESOLVED:
        patch["resolved_at"] = now
    return patch


def transition_status(
    db: Session,
    intervention: Intervention,
    target: InterventionStatus,
    strict: Optional[bool] = None
) -> Intervention:
    """
    Move an intervention to ``target``

    Terminal statuses are never left. Outside strict mode any other target
    is applied as requested, skipping intermediate steps if asked to. The
    write is a single UPDATE keyed by id; the given object is only updated
    after the commit succeeds.
    """
    target = InterventionStatus(target)
    current = InterventionStatus(intervention.status)
    strict = settings.STRICT_STATUS_TRANSITIONS if strict is None else strict

    if current == target:
        return intervention
    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"A intervenção está {current.value} e não pode mudar de estado.",
            detail=f"{current.value} -> {target.value}"
        )
    if strict and not is_allowed_transition(current, target):
        raise InvalidTransitionError(detail=f"{current.value} -> {target.value}")

    patch = build_status_patch(target)
    try:
        db.query(Intervention).filter(Intervention.id == intervention.id).update(
            patch, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Status update failed for intervention %s: %s", intervention.id, e)
        raise PersistenceError("Não foi possível atualizar o estado.", detail=str(e)) from e

    for key, value in patch.items():
        setattr(intervention, key, value)
    logger.info("Intervention %s: %s -> %s", intervention.id, current.value, target.value)
    return intervention


def update_intervention_status(
    db: Session,
    intervention_id: uuid.UUID,
    target: InterventionStatus,
    strict: Optional[bool] = None
) -> Intervention:
    """Load an intervention by id and transition it"""
    intervention = db.query(Intervention).filter(Intervention.id == intervention_id).first()
    if not intervention:
        raise NotFoundError("Intervention not found")
    return transition_status(db, intervention, target, strict=strict)
