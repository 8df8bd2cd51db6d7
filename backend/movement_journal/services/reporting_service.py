# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy import and_, func, or_, select

from ..errors import ValidationError
from ..extensions import db
from ..models import Movement, User
from ..permissions import SUPERVISOR_ROLES, role_has_permission
from ..time_utils import today


class ReportError(ValidationError):
    """Raised when a report cannot be produced from the given parameters."""
    pass


# number of buckets per timeframe
_TRENDS = {
    "daily": 7,
    "weekly": 12,
    "monthly": 12,
    "yearly": 5,
}
_TIMEFRAME_ALIASES = {"month": "monthly", "year": "yearly", "week": "weekly", "day": "daily"}

TOP_USERS_LIMIT = 5


def normalize_timeframe(timeframe: str | None) -> str:
    value = (timeframe or "daily").strip().lower()
    value = _TIMEFRAME_ALIASES.get(value, value)
    if value not in _TRENDS:
        raise ReportError("timeframe must be daily, weekly, monthly, or yearly")
    return value


def performance_percentage(approved: int, rejected: int) -> int:
    """
    Approval rate as a whole percentage.

    No processed movements counts as 100 (an empty history is a perfect one).
    """
    processed = approved + rejected
    if processed == 0:
        return 100
    return int(round(approved / processed * 100))


def stats_scope(viewer: User | None):
    """
    Criterion restricting dashboard figures to what `viewer` is accountable for.

    None means unscoped (administrators, or internal callers with no viewer).
    """
    if viewer is None or role_has_permission(viewer.role, "VIEW_ALL_MOVEMENTS"):
        return None
    if viewer.role in SUPERVISOR_ROLES:
        direct_reports = select(User.id).where(User.supervisor_id == viewer.id)
        return or_(
            Movement.assigned_supervisor_id == viewer.id,
            and_(Movement.staff_id.in_(direct_reports), Movement.assigned_supervisor_id.is_(None)),
            Movement.approved_by == viewer.id,
        )
    return Movement.staff_id == viewer.id


def _scoped(query, scope):
    return query.filter(scope) if scope is not None else query


def _count(scope, *criteria) -> int:
    query = _scoped(db.session.query(func.count(Movement.id)), scope)
    if criteria:
        query = query.filter(*criteria)
    return int(query.scalar() or 0)


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _week_label(monday: date) -> str:
    year, week, _ = monday.isocalendar()
    return f"{year}-W{week:02d}"


def _period(timeframe: str):
    """SQL bucket key for a movement date."""
    if timeframe == "daily":
        return func.strftime("%Y-%m-%d", Movement.date)
    if timeframe == "weekly":
        # Monday of the week, so a week spanning New Year stays one bucket
        return func.date(Movement.date, "-6 days", "weekday 1")
    if timeframe == "monthly":
        return func.strftime("%Y-%m", Movement.date)
    return func.strftime("%Y", Movement.date)


def _window_keys(timeframe: str, end: date) -> list[tuple[str, str]]:
    """(bucket key, display label) pairs for the window ending at `end`, oldest first."""
    size = _TRENDS[timeframe]
    steps = range(size - 1, -1, -1)

    if timeframe == "daily":
        return [((end - timedelta(days=i)).isoformat(),) * 2 for i in steps]
    if timeframe == "weekly":
        mondays = [_week_start(end) - timedelta(weeks=i) for i in steps]
        return [(monday.isoformat(), _week_label(monday)) for monday in mondays]
    if timeframe == "monthly":
        keys = []
        for i in steps:
            year, month = divmod(end.year * 12 + end.month - 1 - i, 12)
            keys.append((f"{year:04d}-{month + 1:02d}",) * 2)
        return keys
    return [(f"{end.year - i:04d}",) * 2 for i in steps]


def _window_start(timeframe: str, end: date) -> str:
    size = _TRENDS[timeframe]
    if timeframe == "daily":
        start = end - timedelta(days=size - 1)
    elif timeframe == "weekly":
        start = _week_start(end) - timedelta(weeks=size - 1)
    elif timeframe == "monthly":
        year, month = divmod(end.year * 12 + end.month - 1 - (size - 1), 12)
        start = date(year, month + 1, 1)
    else:
        start = date(end.year - (size - 1), 1, 1)
    return start.isoformat()


def movement_trend(timeframe: str | None = "daily", *, scope=None, end: date | None = None) -> list[dict]:
    """
    Dense movement counts per period, oldest first.

    Every bucket in the window is present; periods without movements carry 0.
    daily = 7 days, weekly = 12 ISO weeks (Monday-based, labelled YYYY-Www),
    monthly = 12 months, yearly = 5 years, all ending with the period
    containing `end` (default: today, UTC).
    """
    timeframe = normalize_timeframe(timeframe)
    end = end or today()

    period = _period(timeframe)
    query = db.session.query(
        period.label("period"),
        func.count(Movement.id).label("count"),
    ).filter(
        Movement.date >= _window_start(timeframe, end),
        Movement.date <= end.isoformat(),
    )
    rows = _scoped(query, scope).group_by("period").all()
    counts = {row.period: int(row.count) for row in rows}

    return [
        {"date": label, "count": counts.get(key, 0)}
        for key, label in _window_keys(timeframe, end)
    ]


def _district_stats(scope) -> list[dict]:
    query = db.session.query(Movement.district, func.count(Movement.id).label("count")).filter(
        Movement.district.isnot(None),
        Movement.district != "",
    )
    rows = _scoped(query, scope).group_by(Movement.district).order_by(Movement.district.asc()).all()
    return [{"district": row.district, "count": int(row.count)} for row in rows]


def _division_stats(scope, *, order_by_count: bool = False) -> list[dict]:
    count = func.count(Movement.id).label("count")
    query = db.session.query(Movement.division, count).filter(
        Movement.division.isnot(None),
        Movement.division != "",
    )
    query = _scoped(query, scope).group_by(Movement.division)
    if order_by_count:
        query = query.order_by(count.desc(), Movement.division.asc())
    else:
        query = query.order_by(Movement.division.asc())
    return [{"division": row.division, "count": int(row.count)} for row in query.all()]


def dashboard_stats(viewer: User | None, timeframe: str | None = "daily") -> dict:
    timeframe = normalize_timeframe(timeframe)
    scope = stats_scope(viewer)

    approved = _count(scope, Movement.status == "approved")
    rejected = _count(scope, Movement.status == "rejected")
    distinct_submitters = _scoped(
        db.session.query(func.count(func.distinct(Movement.staff_id))), scope
    ).scalar()

    return {
        "totalMovements": _count(scope),
        "distinctSubmitters": int(distinct_submitters or 0),
        "pendingApprovals": _count(scope, Movement.status == "pending"),
        "approvedMovements": approved,
        "rejectedMovements": rejected,
        "unassignedEntries": _count(scope, or_(Movement.division.is_(None), Movement.division == "")),
        "totalUsers": int(db.session.query(func.count(User.id)).scalar() or 0),
        "performancePercentage": performance_percentage(approved, rejected),
        "districtStats": _district_stats(scope),
        "divisionStats": _division_stats(scope),
        "movementTrends": movement_trend(timeframe, scope=scope),
        "timeframe": timeframe,
    }


# =============================================================================
# ADMINISTRATOR REPORTS (unscoped)
# =============================================================================

def summary_report() -> dict:
    active_users = db.session.query(func.count(func.distinct(Movement.staff_id))).scalar()
    return {
        "totalMovements": _count(None),
        "activeUsers": int(active_users or 0),
        "pendingApprovals": _count(None, Movement.status == "pending"),
        "completedMovements": _count(None, Movement.status == "approved"),
    }


def division_report() -> list[dict]:
    return _division_stats(None, order_by_count=True)


def over_time_report(range_: str | None = "daily") -> list[dict]:
    return movement_trend(range_)


def top_users_report(limit: int = TOP_USERS_LIMIT) -> list[dict]:
    count = func.count(Movement.id).label("count")
    rows = (
        db.session.query(User.id, User.full_name, count)
        .join(Movement, Movement.staff_id == User.id)
        .group_by(User.id, User.full_name)
        .order_by(count.desc(), User.full_name.asc())
        .limit(limit)
        .all()
    )
    return [{"user_id": row.id, "full_name": row.full_name, "count": int(row.count)} for row in rows]
