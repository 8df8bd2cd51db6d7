# Overview: Service-layer operations for movements; encapsulates business logic and database work.

"""
Movement Lifecycle Service

================================================================================
PURPOSE: Route field movements from submission to a supervisor's decision
================================================================================

STATE MACHINE:
    pending -> acknowledged -> assigned -> approved | rejected

    pending:      submitted by the staff member, administrators notified
    acknowledged: seen by an administrator, senior field engineers notified
    assigned:     owned by exactly one supervisor (assign or claim)
    approved /
    rejected:     terminal, carries remarks and the reviewer (approved_by)

    A supervisor may also claim a pending/acknowledged movement directly.
    Administrators may re-assign an assigned movement (overwrite).
    Reviewers may decide any non-terminal movement.

CLAIM: a single guarded UPDATE (... WHERE assigned_supervisor_id IS NULL).
The predicate and the write are one statement, so at most one supervisor can
win; the loser gets ClaimConflictError.

VISIBILITY (read path):
    administrators      -> everything
    field engineers     -> own movements
    supervisors         -> own, OR assigned to them, OR approved by them,
                           OR (owner reports to them AND unassigned),
                           OR (district in their districts AND unassigned)
    Ordered by movement date desc, then created_at desc.

Every mutation writes one audit entry per movement and commits once.
================================================================================
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import joinedload

from ..errors import (
    AuthorizationError,
    ClaimConflictError,
    LifecycleError,
    NotFoundError,
    ValidationError,
    require_id_list,
)
from ..extensions import db
from ..models import Movement, User, UserDistrict
from ..permissions import SENIOR_FIELD_ENGINEER, SUPERVISOR_ROLES, SYSTEM_ADMINISTRATOR, role_has_permission
from . import audit_service, notification_service


PENDING = "pending"
ACKNOWLEDGED = "acknowledged"
ASSIGNED = "assigned"
APPROVED = "approved"
REJECTED = "rejected"

VALID_STATUSES = {PENDING, ACKNOWLEDGED, ASSIGNED, APPROVED, REJECTED}
TERMINAL_STATUSES = {APPROVED, REJECTED}
CLAIMABLE_STATUSES = (PENDING, ACKNOWLEDGED)
REVIEW_DECISIONS = (APPROVED, REJECTED)

_VALID_TRANSITIONS = {
    (PENDING, ACKNOWLEDGED),
    (PENDING, ASSIGNED),
    (ACKNOWLEDGED, ASSIGNED),
    (ASSIGNED, ASSIGNED),
    (PENDING, APPROVED),
    (PENDING, REJECTED),
    (ACKNOWLEDGED, APPROVED),
    (ACKNOWLEDGED, REJECTED),
    (ASSIGNED, APPROVED),
    (ASSIGNED, REJECTED),
}

EDITABLE_FIELDS = (
    "date",
    "time_in",
    "time_out",
    "due_date",
    "division",
    "district",
    "area",
    "branch",
    "purpose",
    "transport_mode",
    "accomplishments",
)


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise LifecycleError(
            f"Invalid status '{status}'. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )


def can_transition(from_status: str, to_status: str) -> bool:
    """
    Check if a state transition is valid.

    Same-state transitions are no-ops and allowed for non-terminal states.
    Terminal states (approved, rejected) accept nothing.
    """
    validate_status(from_status)
    validate_status(to_status)

    if from_status in TERMINAL_STATUSES:
        return False
    if from_status == to_status:
        return True
    return (from_status, to_status) in _VALID_TRANSITIONS


def _require_transition(movement: Movement, to_status: str) -> None:
    if not can_transition(movement.status, to_status):
        raise LifecycleError(
            f"Cannot move movement #{movement.id} from '{movement.status}' to '{to_status}'"
        )


def _validate_date(value, field: str):
    if value in (None, ""):
        return None
    try:
        parsed = datetime.strptime(str(value).strip(), "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")
    # stored zero-padded so string ordering and SQLite date functions agree
    return parsed.date().isoformat()


def _clean_fields(data: dict) -> dict:
    values = {}
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if isinstance(value, str):
            value = value.strip() or None
        if field in ("date", "due_date"):
            value = _validate_date(value, field)
        values[field] = value
    return values


def get_movement(movement_id: int) -> Movement:
    movement = db.session.get(Movement, movement_id)
    if not movement:
        raise NotFoundError(f"Movement #{movement_id} not found")
    return movement


# =============================================================================
# VISIBILITY
# =============================================================================

def visibility_filter(viewer: User):
    """
    SQL criterion selecting the movements `viewer` may read.

    Returns None when the viewer sees everything.
    """
    if role_has_permission(viewer.role, "VIEW_ALL_MOVEMENTS"):
        return None

    if viewer.role not in SUPERVISOR_ROLES:
        return Movement.staff_id == viewer.id

    unassigned = Movement.assigned_supervisor_id.is_(None)
    direct_reports = select(User.id).where(User.supervisor_id == viewer.id)
    viewer_districts = select(UserDistrict.district).where(UserDistrict.user_id == viewer.id)

    return or_(
        Movement.staff_id == viewer.id,
        Movement.assigned_supervisor_id == viewer.id,
        Movement.approved_by == viewer.id,
        and_(Movement.staff_id.in_(direct_reports), unassigned),
        and_(Movement.district.in_(viewer_districts), unassigned),
    )


def list_visible(viewer: User) -> list[dict]:
    query = db.session.query(Movement).options(
        joinedload(Movement.staff),
        joinedload(Movement.assigned_supervisor),
    )
    criterion = visibility_filter(viewer)
    if criterion is not None:
        query = query.filter(criterion)

    movements = query.order_by(
        Movement.date.desc(),
        Movement.created_at.desc(),
        Movement.id.desc(),
    ).all()
    return [m.to_dict() for m in movements]


def can_view(movement_id: int, viewer: User) -> bool:
    query = db.session.query(Movement.id).filter(Movement.id == movement_id)
    criterion = visibility_filter(viewer)
    if criterion is not None:
        query = query.filter(criterion)
    return query.first() is not None


def _require_owner_or_manager(movement: Movement, actor: User) -> None:
    if movement.staff_id == actor.id:
        return
    if role_has_permission(actor.role, "MANAGE_MOVEMENTS"):
        return
    raise AuthorizationError("You can only modify your own movements")


# =============================================================================
# CREATE / EDIT / DELETE
# =============================================================================

def next_movement_id() -> int:
    """Preview of the next id (MAX(id) + 1); not a reservation."""
    max_id = db.session.query(func.max(Movement.id)).scalar()
    return (max_id or 0) + 1


def create_movement(data: dict, *, actor: User) -> Movement:
    """
    Submit a movement in 'pending' state.

    Staff submit for themselves; MANAGE_MOVEMENTS holders may pass staff_id
    to submit on someone's behalf. Every System Administrator is notified.
    """
    fields = _clean_fields(data)
    if not fields.get("date"):
        raise ValidationError("date is required")

    staff_id = actor.id
    requested = data.get("staff_id")
    if requested not in (None, ""):
        try:
            requested = int(requested)
        except (TypeError, ValueError):
            raise ValidationError("staff_id must be an integer")
    if requested not in (None, "") and requested != actor.id:
        if not role_has_permission(actor.role, "MANAGE_MOVEMENTS"):
            raise AuthorizationError("You can only submit movements for yourself")
        staff_id = requested
        if not db.session.get(User, staff_id):
            raise ValidationError(f"Staff member {staff_id} does not exist")

    movement = Movement(staff_id=staff_id, status=PENDING, **fields)
    db.session.add(movement)
    db.session.flush()

    notification_service.notify_role(
        SYSTEM_ADMINISTRATOR,
        f"A new Entry has been submitted (Movement #{movement.id}).",
    )
    audit_service.log_action(
        staff_id,
        "MOVEMENT_CREATED",
        f"Created movement #{movement.id} for {movement.date}",
    )
    db.session.commit()
    return movement


def update_movement(movement_id: int, data: dict, *, actor: User) -> Movement:
    """Edit descriptive fields only; lifecycle columns are untouched."""
    movement = get_movement(movement_id)
    _require_owner_or_manager(movement, actor)

    for field, value in _clean_fields(data).items():
        setattr(movement, field, value)

    audit_service.log_action(actor.id, "MOVEMENT_UPDATED", f"Updated movement #{movement_id}")
    db.session.commit()
    return movement


def _delete(movement_id: int, actor: User) -> None:
    movement = get_movement(movement_id)
    _require_owner_or_manager(movement, actor)
    db.session.delete(movement)
    audit_service.log_action(actor.id, "MOVEMENT_DELETED", f"Deleted movement #{movement_id}")


def delete_movement(movement_id: int, *, actor: User) -> None:
    _delete(movement_id, actor)
    db.session.commit()


def bulk_delete(ids, *, actor: User) -> int:
    """Delete several movements atomically; any failure aborts the batch."""
    movement_ids = list(dict.fromkeys(require_id_list(ids, "movement IDs")))
    for movement_id in movement_ids:
        _delete(movement_id, actor)
    db.session.commit()
    return len(movement_ids)


# =============================================================================
# LIFECYCLE TRANSITIONS
# =============================================================================

def _acknowledge(movement_id: int) -> Movement:
    movement = get_movement(movement_id)
    if movement.status == ACKNOWLEDGED:
        # repeat acknowledgement: nothing to announce or audit
        return movement
    _require_transition(movement, ACKNOWLEDGED)
    movement.status = ACKNOWLEDGED

    notification_service.notify_role(
        SENIOR_FIELD_ENGINEER,
        f"Movement #{movement_id} has been acknowledged and is ready for assignment.",
    )
    audit_service.log_action(None, "MOVEMENT_ACKNOWLEDGED", f"Movement #{movement_id} acknowledged")
    return movement


def acknowledge(movement_id: int) -> Movement:
    """pending -> acknowledged. Audited as a system action (null actor)."""
    movement = _acknowledge(movement_id)
    db.session.commit()
    return movement


def bulk_acknowledge(ids) -> int:
    movement_ids = list(dict.fromkeys(require_id_list(ids, "movement IDs")))
    for movement_id in movement_ids:
        _acknowledge(movement_id)
    db.session.commit()
    return len(movement_ids)


def assign(movement_id: int, supervisor_id, *, actor: User) -> Movement:
    """
    Administrator-directed assignment. Overwrites any existing assignee.
    """
    if supervisor_id in (None, ""):
        raise ValidationError("assigned_supervisor_id is required")
    try:
        supervisor_id = int(supervisor_id)
    except (TypeError, ValueError):
        raise ValidationError("assigned_supervisor_id must be an integer")

    movement = get_movement(movement_id)
    supervisor = db.session.get(User, supervisor_id)
    if not supervisor:
        raise ValidationError(f"Supervisor {supervisor_id} does not exist")
    _require_transition(movement, ASSIGNED)

    movement.assigned_supervisor_id = supervisor_id
    movement.status = ASSIGNED

    notification_service.notify_user(
        supervisor_id,
        f"A new Entry has been assigned to you (Movement #{movement_id}).",
    )
    audit_service.log_action(
        actor.id,
        "MOVEMENT_ASSIGNED",
        f"Assigned movement #{movement_id} to supervisor {supervisor_id}",
    )
    db.session.commit()
    return movement


def claim(movement_id: int, *, supervisor: User) -> Movement:
    """
    Exclusive self-assignment.

    The guard and the write are a single UPDATE statement; whoever's UPDATE
    matches first wins. Raises NotFoundError for a missing movement and
    ClaimConflictError when it is already assigned or closed.
    """
    claimed = (
        db.session.query(Movement)
        .filter(
            Movement.id == movement_id,
            Movement.assigned_supervisor_id.is_(None),
            Movement.status.in_(CLAIMABLE_STATUSES),
        )
        .update(
            {Movement.assigned_supervisor_id: supervisor.id, Movement.status: ASSIGNED},
            synchronize_session=False,
        )
    )

    if not claimed:
        db.session.rollback()
        if db.session.query(Movement.id).filter(Movement.id == movement_id).first() is None:
            raise NotFoundError(f"Movement #{movement_id} not found")
        raise ClaimConflictError("Movement already assigned or not found")

    audit_service.log_action(supervisor.id, "MOVEMENT_CLAIMED", f"Claimed movement #{movement_id}")
    db.session.commit()
    return get_movement(movement_id)


def review(movement_id: int, decision: str, remarks: str | None, *, reviewer: User) -> Movement:
    """
    Approve or reject a movement and record the reviewer as approved_by.

    The reviewer must be able to see the movement. The owner is notified.
    """
    if decision not in REVIEW_DECISIONS:
        raise ValidationError("status must be 'approved' or 'rejected'")

    movement = get_movement(movement_id)
    if not can_view(movement_id, reviewer):
        raise AuthorizationError("You cannot review this movement")
    _require_transition(movement, decision)

    movement.status = decision
    movement.supervisor_remarks = remarks
    movement.approved_by = reviewer.id

    notification_service.notify_user(
        movement.staff_id,
        f"Movement #{movement_id} has been {decision}.",
    )
    audit_service.log_action(
        reviewer.id,
        "MOVEMENT_APPROVED" if decision == APPROVED else "MOVEMENT_REJECTED",
        f"Movement #{movement_id} {decision} by supervisor {reviewer.id}",
    )
    db.session.commit()
    return movement
