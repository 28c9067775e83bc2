"""
Tests for intervention status transitions
"""
import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from techmate.core.errors import InvalidTransitionError, NotFoundError, PersistenceError
from techmate.models.intervention import Intervention, InterventionStatus
from techmate.services.intervention_lifecycle import (
    TERMINAL_STATUSES,
    build_status_patch,
    is_allowed_transition,
    transition_status,
    update_intervention_status,
)


@pytest.fixture
def intervention(db_session, machine, technician):
    intervention = Intervention(
        machine_id=machine.id,
        technician_id=technician.id,
        problem_description="Motor sobreaquece após 20 minutos"
    )
    db_session.add(intervention)
    db_session.commit()
    return intervention


def reload(db_session, intervention_id):
    db_session.expire_all()
    return db_session.query(Intervention).filter(Intervention.id == intervention_id).one()


def test_new_intervention_defaults(intervention):
    assert intervention.status == InterventionStatus.PENDING
    assert intervention.resolved_at is None


def test_start_work_does_not_touch_resolved_at(db_session, intervention):
    transition_status(db_session, intervention, InterventionStatus.IN_PROGRESS)

    stored = reload(db_session, intervention.id)
    assert stored.status == InterventionStatus.IN_PROGRESS
    assert stored.resolved_at is None


def test_resolve_sets_resolved_at(db_session, intervention):
    before = datetime.utcnow()
    transition_status(db_session, intervention, InterventionStatus.IN_PROGRESS)
    transition_status(db_session, intervention, InterventionStatus.RESOLVED)

    stored = reload(db_session, intervention.id)
    assert stored.status == InterventionStatus.RESOLVED
    assert stored.resolved_at is not None
    assert stored.resolved_at >= before


def test_cancel_leaves_resolved_at_empty(db_session, intervention):
    transition_status(db_session, intervention, InterventionStatus.CANCELLED)

    stored = reload(db_session, intervention.id)
    assert stored.status == InterventionStatus.CANCELLED
    assert stored.resolved_at is None


def test_resolved_at_is_never_cleared(db_session, intervention):
    stamp = datetime(2024, 3, 1, 9, 30)
    intervention.status = InterventionStatus.IN_PROGRESS
    intervention.resolved_at = stamp
    db_session.commit()

    transition_status(db_session, intervention, InterventionStatus.CANCELLED)

    stored = reload(db_session, intervention.id)
    assert stored.status == InterventionStatus.CANCELLED
    assert stored.resolved_at == stamp


@pytest.mark.parametrize("terminal", [InterventionStatus.RESOLVED, InterventionStatus.CANCELLED])
def test_terminal_statuses_are_final(db_session, intervention, terminal):
    transition_status(db_session, intervention, terminal)

    with pytest.raises(InvalidTransitionError):
        transition_status(db_session, intervention, InterventionStatus.IN_PROGRESS)

    assert reload(db_session, intervention.id).status == terminal


def test_same_status_is_a_noop(intervention):
    db = MagicMock()

    result = transition_status(db, intervention, InterventionStatus.PENDING)

    assert result is intervention
    db.commit.assert_not_called()


def test_loose_mode_allows_skipping_in_progress(db_session, intervention):
    transition_status(db_session, intervention, InterventionStatus.RESOLVED, strict=False)

    stored = reload(db_session, intervention.id)
    assert stored.status == InterventionStatus.RESOLVED
    assert stored.resolved_at is not None


def test_strict_mode_rejects_skipping_in_progress(db_session, intervention):
    with pytest.raises(InvalidTransitionError):
        transition_status(db_session, intervention, InterventionStatus.RESOLVED, strict=True)

    assert reload(db_session, intervention.id).status == InterventionStatus.PENDING


def test_strict_mode_follows_transition_table(db_session, intervention):
    transition_status(db_session, intervention, InterventionStatus.IN_PROGRESS, strict=True)
    transition_status(db_session, intervention, InterventionStatus.RESOLVED, strict=True)

    assert reload(db_session, intervention.id).status == InterventionStatus.RESOLVED


def test_transition_table():
    assert is_allowed_transition(InterventionStatus.PENDING, InterventionStatus.IN_PROGRESS)
    assert is_allowed_transition(InterventionStatus.PENDING, InterventionStatus.CANCELLED)
    assert is_allowed_transition(InterventionStatus.IN_PROGRESS, InterventionStatus.RESOLVED)
    assert not is_allowed_transition(InterventionStatus.PENDING, InterventionStatus.RESOLVED)
    assert TERMINAL_STATUSES == {InterventionStatus.RESOLVED, InterventionStatus.CANCELLED}


def test_build_status_patch_only_stamps_resolution():
    now = datetime(2024, 5, 2, 14, 0)

    resolve = build_status_patch(InterventionStatus.RESOLVED, now=now)
    cancel = build_status_patch(InterventionStatus.CANCELLED, now=now)

    assert resolve == {"status": InterventionStatus.RESOLVED, "updated_at": now, "resolved_at": now}
    assert "resolved_at" not in cancel


def test_store_failure_leaves_record_unchanged():
    intervention = Intervention(id=uuid.uuid4(), status=InterventionStatus.PENDING)
    db = MagicMock()
    db.commit.side_effect = SQLAlchemyError("connection lost")

    with pytest.raises(PersistenceError):
        transition_status(db, intervention, InterventionStatus.RESOLVED)

    db.rollback.assert_called_once()
    assert intervention.status == InterventionStatus.PENDING
    assert intervention.resolved_at is None


def test_update_unknown_intervention(db_session):
    with pytest.raises(NotFoundError):
        update_intervention_status(db_session, uuid.uuid4(), InterventionStatus.RESOLVED)


def test_update_by_id(db_session, intervention):
    updated = update_intervention_status(db_session, intervention.id, "in_progress")

    assert updated.status == InterventionStatus.IN_PROGRESS
