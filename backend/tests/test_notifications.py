"""
Notification and knowledge base tests.
"""

import pytest

from movement_journal.models import AuditLog, Notification
from movement_journal.services import notification_service


@pytest.fixture
def inbox(db_session, engineer, supervisor):
    """Two notifications for the engineer, one for the supervisor."""
    mine = [notification_service.notify_user(engineer.id, f"note {i}") for i in range(2)]
    theirs = notification_service.notify_user(supervisor.id, "not yours")
    db_session.commit()
    return {"mine": [n.id for n in mine], "theirs": theirs.id}


class TestNotifications:

    def test_list_own(self, client, db_session, engineer_headers, inbox):
        resp = client.get("/api/notifications", headers=engineer_headers)
        ids = {n["id"] for n in resp.get_json()["notifications"]}
        assert ids == set(inbox["mine"])

    def test_cannot_list_someone_elses(self, client, db_session, engineer_headers, supervisor, inbox):
        resp = client.get(f"/api/notifications/{supervisor.id}", headers=engineer_headers)
        assert resp.status_code == 403

    def test_admin_can_list_anyones(self, client, db_session, admin_headers, supervisor, inbox):
        resp = client.get(f"/api/notifications/{supervisor.id}", headers=admin_headers)
        assert [n["id"] for n in resp.get_json()["notifications"]] == [inbox["theirs"]]

    def test_mark_read(self, client, db_session, engineer_headers, inbox):
        target = inbox["mine"][0]
        resp = client.put(f"/api/notifications/{target}/read", headers=engineer_headers)
        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(Notification, target).is_read is True

    def test_foreign_notification_counts_as_missing(self, client, db_session, engineer_headers, inbox):
        resp = client.put(f"/api/notifications/{inbox['theirs']}/read", headers=engineer_headers)
        assert resp.status_code == 404

    def test_bulk_read_is_atomic(self, client, db_session, engineer_headers, inbox):
        resp = client.put(
            "/api/notifications/bulk/read",
            json={"ids": inbox["mine"] + [inbox["theirs"]]},
            headers=engineer_headers,
        )
        assert resp.status_code == 404
        db_session.expire_all()
        assert not any(db_session.get(Notification, i).is_read for i in inbox["mine"])

    def test_bulk_read(self, client, db_session, engineer_headers, inbox):
        resp = client.put("/api/notifications/bulk/read", json={"ids": inbox["mine"]}, headers=engineer_headers)
        assert resp.get_json()["updated"] == 2

    def test_delete(self, client, db_session, engineer_headers, inbox):
        target = inbox["mine"][1]
        assert client.delete(f"/api/notifications/{target}", headers=engineer_headers).status_code == 200
        db_session.expire_all()
        assert db_session.get(Notification, target) is None

    @pytest.mark.parametrize("method,path", [("DELETE", "/api/notifications/bulk"), ("POST", "/api/notifications/bulk/delete")])
    def test_bulk_delete(self, client, db_session, engineer_headers, inbox, method, path):
        resp = getattr(client, method.lower())(path, json={"ids": inbox["mine"]}, headers=engineer_headers)
        assert resp.status_code == 200
        assert resp.get_json()["deleted"] == 2
        assert db_session.query(Notification).count() == 1

    def test_bulk_delete_rejects_empty(self, client, db_session, engineer_headers):
        resp = client.delete("/api/notifications/bulk", json={"ids": []}, headers=engineer_headers)
        assert resp.status_code == 400

    def test_mark_read_writes_no_audit(self, client, db_session, engineer_headers, inbox):
        client.put(f"/api/notifications/{inbox['mine'][0]}/read", headers=engineer_headers)
        assert db_session.query(AuditLog).count() == 0


class TestKnowledgeBase:

    def test_supervisor_creates_entry(self, client, db_session, supervisor, supervisor_headers):
        resp = client.post(
            "/api/kb",
            json={"title": "Fibre splicing guide", "category": "Guides", "type": "pdf", "version": "2"},
            headers=supervisor_headers,
        )
        assert resp.status_code == 201
        entry = resp.get_json()["entry"]
        assert entry["created_by"] == supervisor.id
        assert db_session.query(AuditLog).filter_by(action="KB_ENTRY_CREATED").count() == 1

    def test_invalid_type(self, client, db_session, supervisor_headers):
        resp = client.post("/api/kb", json={"title": "x", "type": "video"}, headers=supervisor_headers)
        assert resp.status_code == 400

    def test_title_required(self, client, db_session, supervisor_headers):
        resp = client.post("/api/kb", json={"type": "link"}, headers=supervisor_headers)
        assert resp.status_code == 400

    def test_everyone_can_read_newest_first(self, client, db_session, supervisor_headers, engineer_headers):
        client.post("/api/kb", json={"title": "First", "type": "link"}, headers=supervisor_headers)
        client.post("/api/kb", json={"title": "Second", "type": "word"}, headers=supervisor_headers)

        entries = client.get("/api/kb", headers=engineer_headers).get_json()["entries"]

        assert [e["title"] for e in entries] == ["Second", "First"]
