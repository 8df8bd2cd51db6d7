from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Movement(db.Model):
    """
    One field trip logged by a staff member and routed for approval.

    STATE MACHINE (see services/movement_service.py):
        pending -> acknowledged -> assigned -> approved | rejected
        pending/acknowledged -> assigned via exclusive claim

    date/time_in/time_out/due_date are kept as the ISO strings the client
    submits ("YYYY-MM-DD", "HH:MM"); reporting buckets on them with strftime.
    """
    __tablename__ = "movements"
    __table_args__ = (
        db.Index("ix_movements_date_created", "date", "created_at"),
        db.Index("ix_movements_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    date = db.Column(db.String(10), nullable=True)
    time_in = db.Column(db.String(8), nullable=True)
    time_out = db.Column(db.String(8), nullable=True)
    due_date = db.Column(db.String(10), nullable=True)

    division = db.Column(db.String(128), nullable=True)
    district = db.Column(db.String(128), nullable=True, index=True)
    area = db.Column(db.String(128), nullable=True)
    branch = db.Column(db.String(128), nullable=True)

    purpose = db.Column(db.Text, nullable=True)
    transport_mode = db.Column(db.String(64), nullable=True)
    accomplishments = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending")
    supervisor_remarks = db.Column(db.Text, nullable=True)
    approved_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    assigned_supervisor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    staff = db.relationship("User", foreign_keys=[staff_id])
    approver = db.relationship("User", foreign_keys=[approved_by])
    assigned_supervisor = db.relationship("User", foreign_keys=[assigned_supervisor_id])

    def to_dict(self) -> dict:
        staff = self.staff
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "staff_name": staff.full_name if staff else None,
            "position": staff.position if staff else None,
            "user_district": staff.districts if staff else [],
            "date": self.date,
            "time_in": self.time_in,
            "time_out": self.time_out,
            "due_date": self.due_date,
            "division": self.division,
            "district": self.district,
            "area": self.area,
            "branch": self.branch,
            "purpose": self.purpose,
            "transport_mode": self.transport_mode,
            "accomplishments": self.accomplishments,
            "status": self.status,
            "supervisor_remarks": self.supervisor_remarks,
            "approved_by": self.approved_by,
            "assigned_supervisor_id": self.assigned_supervisor_id,
            "assigned_supervisor_name": (
                self.assigned_supervisor.full_name if self.assigned_supervisor else None
            ),
            "created_at": to_utc_z(self.created_at),
        }
