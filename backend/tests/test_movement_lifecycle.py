"""
Movement lifecycle tests.

Verifies:
- Submission creates a pending movement and notifies System Administrators
- Acknowledge / assign / claim / approve transitions and their side effects
- Claim exclusivity (second claimant gets 409)
- Terminal states reject further transitions
- Bulk operations are atomic
"""

from datetime import date

import pytest

from conftest import headers_for
from movement_journal.extensions import db
from movement_journal.models import AuditLog, Movement, Notification
from movement_journal.errors import ClaimConflictError, LifecycleError
from movement_journal.services import movement_service, reporting_service


def _audit_actions(movement_id=None):
    query = db.session.query(AuditLog.action).order_by(AuditLog.id.asc())
    if movement_id is not None:
        query = query.filter(AuditLog.details.contains(f"#{movement_id}"))
    return [row[0] for row in query.all()]


def _messages_for(user_id):
    return [
        n.message
        for n in db.session.query(Notification).filter_by(user_id=user_id).order_by(Notification.id).all()
    ]


# =============================================================================
# STATE MACHINE
# =============================================================================


class TestTransitions:

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            ("pending", "acknowledged"),
            ("pending", "assigned"),
            ("acknowledged", "assigned"),
            ("assigned", "assigned"),
            ("pending", "approved"),
            ("acknowledged", "rejected"),
            ("assigned", "approved"),
            ("assigned", "rejected"),
            ("pending", "pending"),
        ],
    )
    def test_allowed(self, from_status, to_status):
        assert movement_service.can_transition(from_status, to_status)

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            ("acknowledged", "pending"),
            ("assigned", "pending"),
            ("assigned", "acknowledged"),
            ("approved", "rejected"),
            ("rejected", "approved"),
            ("approved", "approved"),
        ],
    )
    def test_denied(self, from_status, to_status):
        assert not movement_service.can_transition(from_status, to_status)

    def test_unknown_status_raises(self):
        with pytest.raises(LifecycleError):
            movement_service.can_transition("pending", "archived")


# =============================================================================
# SUBMISSION
# =============================================================================


class TestCreateMovement:

    def test_create_notifies_admins_and_audits(self, client, db_session, admin, engineer, engineer_headers):
        resp = client.post("/api/movements", json={
            "date": "2026-03-02",
            "time_out": "08:00",
            "district": "East",
            "division": "Networks",
            "purpose": "Router replacement",
        }, headers=engineer_headers)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        movement = body["movement"]
        assert movement["status"] == "pending"
        assert movement["staff_id"] == engineer.id
        assert movement["staff_name"] == "Fred Field"
        assert movement["user_district"] == ["East"]

        assert _messages_for(admin.id) == [
            f"A new Entry has been submitted (Movement #{body['id']})."
        ]
        entry = db_session.query(AuditLog).filter_by(action="MOVEMENT_CREATED").one()
        assert entry.user_id == engineer.id

    def test_date_required(self, client, db_session, engineer_headers):
        resp = client.post("/api/movements", json={"purpose": "x"}, headers=engineer_headers)
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False

    def test_bad_date_format(self, client, db_session, engineer_headers):
        resp = client.post("/api/movements", json={"date": "02/03/2026"}, headers=engineer_headers)
        assert resp.status_code == 400

    def test_unpadded_date_is_stored_zero_padded(self, client, db_session, engineer_headers):
        resp = client.post("/api/movements", json={"date": "2026-3-5"}, headers=engineer_headers)

        assert resp.status_code == 201
        assert resp.get_json()["movement"]["date"] == "2026-03-05"
        db_session.expire_all()
        assert db_session.get(Movement, resp.get_json()["id"]).date == "2026-03-05"

        trend = reporting_service.movement_trend("daily", end=date(2026, 3, 5))
        assert trend[-1] == {"date": "2026-03-05", "count": 1}

    def test_staff_cannot_submit_for_someone_else(self, client, db_session, engineer_headers, supervisor):
        resp = client.post(
            "/api/movements",
            json={"date": "2026-03-02", "staff_id": supervisor.id},
            headers=engineer_headers,
        )
        assert resp.status_code == 403

    def test_admin_can_submit_on_behalf(self, client, db_session, admin_headers, engineer):
        resp = client.post(
            "/api/movements",
            json={"date": "2026-03-02", "staff_id": engineer.id},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["movement"]["staff_id"] == engineer.id

    def test_next_id(self, client, db_session, engineer, engineer_headers, make_movement):
        resp = client.get("/api/movements/next-id", headers=engineer_headers)
        assert resp.get_json()["nextId"] == 1

        movement = make_movement(engineer)
        resp = client.get("/api/movements/next-id", headers=engineer_headers)
        assert resp.get_json()["nextId"] == movement.id + 1


# =============================================================================
# ACKNOWLEDGE / ASSIGN
# =============================================================================


class TestAcknowledgeAndAssign:

    def test_acknowledge_notifies_senior_field_engineers(
        self, client, db_session, admin_headers, engineer, supervisor, other_supervisor, make_movement
    ):
        movement = make_movement(engineer)
        movement_id = movement.id

        resp = client.put(f"/api/movements/{movement_id}/acknowledge", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["movement"]["status"] == "acknowledged"

        expected = f"Movement #{movement_id} has been acknowledged and is ready for assignment."
        assert _messages_for(supervisor.id) == [expected]
        assert _messages_for(other_supervisor.id) == [expected]

        entry = db_session.query(AuditLog).filter_by(action="MOVEMENT_ACKNOWLEDGED").one()
        assert entry.user_id is None

    def test_repeat_acknowledge_has_no_side_effects(
        self, client, db_session, admin_headers, engineer, supervisor, make_movement
    ):
        movement_id = make_movement(engineer).id

        first = client.put(f"/api/movements/{movement_id}/acknowledge", headers=admin_headers)
        second = client.put(f"/api/movements/{movement_id}/acknowledge", headers=admin_headers)
        bulk = client.put(
            "/api/movements/bulk/acknowledge", json={"ids": [movement_id]}, headers=admin_headers
        )

        assert (first.status_code, second.status_code, bulk.status_code) == (200, 200, 200)
        assert second.get_json()["movement"]["status"] == "acknowledged"
        assert len(_messages_for(supervisor.id)) == 1
        assert _audit_actions(movement_id).count("MOVEMENT_ACKNOWLEDGED") == 1

    def test_acknowledge_requires_permission(self, client, db_session, supervisor_headers, engineer, make_movement):
        movement = make_movement(engineer)
        resp = client.put(f"/api/movements/{movement.id}/acknowledge", headers=supervisor_headers)
        assert resp.status_code == 403

    def test_acknowledge_missing_movement(self, client, db_session, admin_headers):
        resp = client.put("/api/movements/999/acknowledge", headers=admin_headers)
        assert resp.status_code == 404

    def test_assign_sets_supervisor_and_notifies(
        self, client, db_session, admin_headers, engineer, supervisor, make_movement
    ):
        movement = make_movement(engineer, status="acknowledged")
        movement_id = movement.id

        resp = client.put(
            f"/api/movements/{movement_id}/assign",
            json={"assigned_supervisor_id": supervisor.id},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        data = resp.get_json()["movement"]
        assert data["status"] == "assigned"
        assert data["assigned_supervisor_id"] == supervisor.id
        assert data["assigned_supervisor_name"] == "Sam Senior"
        assert _messages_for(supervisor.id) == [
            f"A new Entry has been assigned to you (Movement #{movement_id})."
        ]
        assert "MOVEMENT_ASSIGNED" in _audit_actions()

    def test_reassign_overwrites(
        self, client, db_session, admin_headers, engineer, supervisor, other_supervisor, make_movement
    ):
        movement = make_movement(engineer, status="assigned", assigned_supervisor_id=supervisor.id)
        resp = client.put(
            f"/api/movements/{movement.id}/assign",
            json={"assigned_supervisor_id": other_supervisor.id},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["movement"]["assigned_supervisor_id"] == other_supervisor.id

    def test_assign_unknown_supervisor(self, client, db_session, admin_headers, engineer, make_movement):
        movement = make_movement(engineer)
        resp = client.put(
            f"/api/movements/{movement.id}/assign",
            json={"assigned_supervisor_id": 4242},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_cannot_assign_closed_movement(
        self, client, db_session, admin_headers, engineer, supervisor, make_movement
    ):
        movement = make_movement(engineer, status="approved")
        resp = client.put(
            f"/api/movements/{movement.id}/assign",
            json={"assigned_supervisor_id": supervisor.id},
            headers=admin_headers,
        )
        assert resp.status_code == 400


# =============================================================================
# CLAIM
# =============================================================================


class TestClaim:

    def test_claim_is_exclusive(
        self, client, db_session, engineer, supervisor, other_supervisor,
        supervisor_headers, other_supervisor_headers, make_movement,
    ):
        movement = make_movement(engineer, district="South")
        movement_id = movement.id

        first = client.put(f"/api/movements/{movement_id}/claim", headers=supervisor_headers)
        second = client.put(f"/api/movements/{movement_id}/claim", headers=other_supervisor_headers)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.get_json()["success"] is False

        db_session.expire_all()
        stored = db_session.get(Movement, movement_id)
        assert stored.assigned_supervisor_id == supervisor.id
        assert stored.status == "assigned"
        assert _audit_actions().count("MOVEMENT_CLAIMED") == 1

    def test_stale_reader_loses(self, db_session, engineer, supervisor, other_supervisor, make_movement):
        """Both supervisors saw the movement unassigned; only the first write lands."""
        movement = make_movement(engineer)
        movement_id = movement.id
        assert movement.assigned_supervisor_id is None

        movement_service.claim(movement_id, supervisor=other_supervisor)
        with pytest.raises(ClaimConflictError):
            movement_service.claim(movement_id, supervisor=supervisor)

        db_session.expire_all()
        assert db_session.get(Movement, movement_id).assigned_supervisor_id == other_supervisor.id

    def test_claim_after_assignment_conflicts(
        self, client, db_session, engineer, supervisor, other_supervisor, other_supervisor_headers, make_movement
    ):
        movement = make_movement(engineer, status="assigned", assigned_supervisor_id=supervisor.id)
        resp = client.put(f"/api/movements/{movement.id}/claim", headers=other_supervisor_headers)
        assert resp.status_code == 409

    def test_claim_missing_movement(self, client, db_session, supervisor_headers):
        resp = client.put("/api/movements/12345/claim", headers=supervisor_headers)
        assert resp.status_code == 404

    def test_field_engineer_cannot_claim(self, client, db_session, engineer, engineer_headers, make_movement):
        movement = make_movement(engineer)
        resp = client.put(f"/api/movements/{movement.id}/claim", headers=engineer_headers)
        assert resp.status_code == 403


# =============================================================================
# REVIEW
# =============================================================================


class TestReview:

    def test_approve_records_reviewer_and_notifies_owner(
        self, client, db_session, engineer, supervisor, supervisor_headers, make_movement
    ):
        movement = make_movement(engineer, status="assigned", assigned_supervisor_id=supervisor.id)
        movement_id = movement.id

        resp = client.put(
            f"/api/movements/{movement_id}/approve",
            json={"status": "approved", "supervisor_remarks": "Good work"},
            headers=supervisor_headers,
        )

        assert resp.status_code == 200
        data = resp.get_json()["movement"]
        assert data["status"] == "approved"
        assert data["approved_by"] == supervisor.id
        assert data["supervisor_remarks"] == "Good work"
        assert _messages_for(engineer.id) == [f"Movement #{movement_id} has been approved."]
        assert "MOVEMENT_APPROVED" in _audit_actions()

    def test_review_accepts_remarks_field(
        self, client, db_session, engineer, supervisor, supervisor_headers, make_movement
    ):
        movement = make_movement(engineer, status="assigned", assigned_supervisor_id=supervisor.id)
        resp = client.put(
            f"/api/movements/{movement.id}/approve",
            json={"status": "approved", "remarks": "Well documented"},
            headers=supervisor_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["movement"]["supervisor_remarks"] == "Well documented"

    def test_reject(self, client, db_session, engineer, supervisor, supervisor_headers, make_movement):
        movement = make_movement(engineer, status="assigned", assigned_supervisor_id=supervisor.id)
        resp = client.put(
            f"/api/movements/{movement.id}/approve",
            json={"status": "rejected", "supervisor_remarks": "Missing details"},
            headers=supervisor_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["movement"]["status"] == "rejected"
        assert "MOVEMENT_REJECTED" in _audit_actions()

    def test_terminal_movement_cannot_be_reviewed_again(
        self, client, db_session, engineer, supervisor, supervisor_headers, make_movement
    ):
        movement = make_movement(
            engineer, status="approved", assigned_supervisor_id=supervisor.id, approved_by=supervisor.id
        )
        resp = client.put(
            f"/api/movements/{movement.id}/approve",
            json={"status": "rejected"},
            headers=supervisor_headers,
        )
        assert resp.status_code == 400

    def test_invalid_decision(self, client, db_session, engineer, admin_headers, make_movement):
        movement = make_movement(engineer)
        resp = client.put(
            f"/api/movements/{movement.id}/approve",
            json={"status": "maybe"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_supervisor_cannot_review_invisible_movement(
        self, client, db_session, make_user, supervisor, other_supervisor_headers, make_movement
    ):
        stranger = make_user(supervisor=supervisor)
        movement = make_movement(stranger, status="assigned", assigned_supervisor_id=supervisor.id)
        resp = client.put(
            f"/api/movements/{movement.id}/approve",
            json={"status": "approved"},
            headers=other_supervisor_headers,
        )
        assert resp.status_code == 403


# =============================================================================
# EDIT / DELETE / BULK
# =============================================================================


class TestEditAndDelete:

    def test_owner_can_edit_descriptive_fields(self, client, db_session, engineer, engineer_headers, make_movement):
        movement = make_movement(engineer)
        resp = client.put(
            f"/api/movements/{movement.id}",
            json={"accomplishments": "Replaced router", "status": "approved"},
            headers=engineer_headers,
        )
        assert resp.status_code == 200
        data = resp.get_json()["movement"]
        assert data["accomplishments"] == "Replaced router"
        # lifecycle columns are not editable through update
        assert data["status"] == "pending"

    def test_other_staff_cannot_edit(self, client, db_session, make_user, engineer, make_movement):
        movement = make_movement(engineer)
        intruder_headers = headers_for(make_user())
        resp = client.put(f"/api/movements/{movement.id}", json={"purpose": "x"}, headers=intruder_headers)
        assert resp.status_code == 403

    def test_delete_missing_movement(self, client, db_session, admin_headers):
        resp = client.delete("/api/movements/31337", headers=admin_headers)
        assert resp.status_code == 404

    def test_owner_can_delete(self, client, db_session, engineer, engineer_headers, make_movement):
        movement = make_movement(engineer)
        movement_id = movement.id
        resp = client.delete(f"/api/movements/{movement_id}", headers=engineer_headers)
        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(Movement, movement_id) is None
        assert "MOVEMENT_DELETED" in _audit_actions()

    def test_bulk_delete_is_atomic(self, client, db_session, admin_headers, engineer, make_movement):
        first = make_movement(engineer).id
        second = make_movement(engineer).id

        resp = client.delete(
            "/api/movements/bulk",
            json={"ids": [first, 999999, second]},
            headers=admin_headers,
        )

        assert resp.status_code == 404
        db_session.expire_all()
        assert db_session.query(Movement).count() == 2
        assert "MOVEMENT_DELETED" not in _audit_actions()

    def test_bulk_delete_one_entry_per_movement(self, client, db_session, admin_headers, engineer, make_movement):
        ids = [make_movement(engineer).id for _ in range(3)]
        resp = client.delete("/api/movements/bulk", json={"ids": ids}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["deleted"] == 3
        assert _audit_actions().count("MOVEMENT_DELETED") == 3

    @pytest.mark.parametrize("payload", [{}, {"ids": []}, {"ids": "1,2"}, {"ids": ["a"]}])
    def test_bulk_rejects_bad_id_lists(self, client, db_session, admin_headers, payload):
        resp = client.delete("/api/movements/bulk", json=payload, headers=admin_headers)
        assert resp.status_code == 400

    def test_bulk_delete_requires_manage_permission(self, client, db_session, engineer, engineer_headers, make_movement):
        movement = make_movement(engineer)
        resp = client.delete("/api/movements/bulk", json={"ids": [movement.id]}, headers=engineer_headers)
        assert resp.status_code == 403

    def test_bulk_acknowledge_is_atomic(self, client, db_session, admin_headers, engineer, make_movement):
        pending = make_movement(engineer).id
        closed = make_movement(engineer, status="approved").id

        resp = client.put(
            "/api/movements/bulk/acknowledge",
            json={"ids": [pending, closed]},
            headers=admin_headers,
        )

        assert resp.status_code == 400
        db_session.expire_all()
        assert db_session.get(Movement, pending).status == "pending"
        assert db_session.query(Notification).count() == 0

    def test_bulk_acknowledge(self, client, db_session, admin_headers, engineer, make_movement):
        ids = [make_movement(engineer).id, make_movement(engineer).id]
        resp = client.put("/api/movements/bulk/acknowledge", json={"ids": ids}, headers=admin_headers)
        assert resp.status_code == 200
        db_session.expire_all()
        assert {db_session.get(Movement, i).status for i in ids} == {"acknowledged"}
        assert _audit_actions().count("MOVEMENT_ACKNOWLEDGED") == 2
