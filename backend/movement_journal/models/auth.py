from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class User(db.Model):
    """
    Staff account: identity, profile, role and reporting line.

    WHY: Every movement, approval and audit entry must be attributable.
    supervisor_id is a weak self-reference; deleting the supervisor nulls it.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_users_username"),
        db.UniqueConstraint("id_number", name="uq_users_id_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    id_number = db.Column(db.String(64), nullable=True)
    username = db.Column(db.String(64), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=True)
    position = db.Column(db.String(128), nullable=True)
    division = db.Column(db.String(128), nullable=True)
    base_office = db.Column(db.String(128), nullable=True)
    role = db.Column(db.String(64), nullable=False, index=True)
    supervisor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    status = db.Column(db.String(16), nullable=False, default="active")  # active, inactive

    # Profile attributes
    avatar_url = db.Column(db.String(512), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone_number = db.Column(db.String(64), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    date_of_birth = db.Column(db.String(32), nullable=True)
    language = db.Column(db.String(64), nullable=True)
    locale = db.Column(db.String(64), nullable=True)
    first_day_of_week = db.Column(db.String(16), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    x_handle = db.Column(db.String(128), nullable=True)
    fediverse_handle = db.Column(db.String(128), nullable=True)
    organisation = db.Column(db.String(255), nullable=True)
    profile_role = db.Column(db.String(128), nullable=True)
    headline = db.Column(db.String(255), nullable=True)
    about = db.Column(db.Text, nullable=True)
    online_status = db.Column(db.String(64), nullable=False, default="Online")
    status_message = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    supervisor = db.relationship("User", remote_side=[id], foreign_keys=[supervisor_id])
    district_rows = db.relationship(
        "UserDistrict",
        order_by="UserDistrict.position",
        cascade="all, delete-orphan",
        lazy=True,
        back_populates="user",
    )

    @property
    def districts(self) -> list[str]:
        return [row.district for row in self.district_rows]

    def set_districts(self, districts: list[str]) -> None:
        """
        Replace the ordered district set, reusing rows that survive.

        Duplicates keep their first position.
        """
        existing = {row.district: row for row in self.district_rows}
        rows = []
        for district in districts:
            if any(r.district == district for r in rows):
                continue
            row = existing.pop(district, None) or UserDistrict(district=district)
            row.position = len(rows)
            rows.append(row)
        self.district_rows = rows

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "id_number": self.id_number,
            "username": self.username,
            "full_name": self.full_name,
            "position": self.position,
            "division": self.division,
            "district": self.districts,
            "base_office": self.base_office,
            "role": self.role,
            "supervisor_id": self.supervisor_id,
            "supervisor_name": self.supervisor.full_name if self.supervisor else None,
            "status": self.status,
            "avatar_url": self.avatar_url,
            "email": self.email,
            "phone_number": self.phone_number,
            "location": self.location,
            "date_of_birth": self.date_of_birth,
            "language": self.language,
            "locale": self.locale,
            "first_day_of_week": self.first_day_of_week,
            "website": self.website,
            "x_handle": self.x_handle,
            "fediverse_handle": self.fediverse_handle,
            "organisation": self.organisation,
            "profile_role": self.profile_role,
            "headline": self.headline,
            "about": self.about,
            "online_status": self.online_status,
            "status_message": self.status_message,
            "created_at": to_utc_z(self.created_at),
        }


class UserDistrict(db.Model):
    """Ordered district assignment for a user (one row per district)."""
    __tablename__ = "user_districts"
    __table_args__ = (
        db.UniqueConstraint("user_id", "district", name="uq_user_districts_user_district"),
        db.Index("ix_user_districts_district", "district"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    district = db.Column(db.String(128), nullable=False)

    user = db.relationship("User", back_populates="district_rows")


class SessionToken(db.Model):
    """
    Bearer session tokens. Only the SHA-256 hash of the token is stored.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
