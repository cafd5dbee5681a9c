import json
import logging
from datetime import timedelta

from sqlalchemy import select

from hrportal.core.security import utcnow
from hrportal.models.audit_log import AuditAction, AuditLog
from hrportal.services.audit import RequestMeta, client_ip, list_audit_logs, record_audit


class TestRecordAudit:

    def test_writes_row_with_json_details(self, db, admin):
        record_audit(
            db,
            action=AuditAction.SETTINGS_UPDATE,
            entity_type="Settings",
            user_id=admin.user_id,
            entity_id=admin.user_id,
            details={"changed": ["smtp_host"], "when": utcnow()},
            ip_address="10.0.0.1",
            user_agent="pytest",
        )

        row = db.execute(select(AuditLog)).scalar_one()
        assert row.entity_id == str(admin.user_id)
        assert json.loads(row.details)["changed"] == ["smtp_host"]
        assert row.ip_address == "10.0.0.1"

    def test_never_raises(self, db, caplog, monkeypatch):
        def broken_commit():
            raise RuntimeError("database is down")

        monkeypatch.setattr(db, "commit", broken_commit)
        with caplog.at_level(logging.ERROR, logger="hrportal.services.audit"):
            record_audit(db, action=AuditAction.LOGIN, entity_type="User")

        assert "Failed to create audit log" in caplog.text


class TestRequestMeta:

    def test_forwarded_for_takes_first_hop(self):
        assert client_ip({"x-forwarded-for": "203.0.113.7, 10.0.0.2"}) == "203.0.113.7"

    def test_falls_back_to_real_ip(self):
        meta = RequestMeta.from_headers({"x-real-ip": "198.51.100.4", "user-agent": "curl/8"})
        assert meta == RequestMeta(ip_address="198.51.100.4", user_agent="curl/8")


class TestListAuditLogs:

    def _seed(self, db, admin, count):
        start = utcnow() - timedelta(hours=count)
        for i in range(count):
            db.add(
                AuditLog(
                    user_id=admin.user_id if i % 2 == 0 else None,
                    action=AuditAction.LOGIN if i % 3 else AuditAction.LOGIN_FAILED,
                    entity_type="User",
                    created_at=start + timedelta(hours=i),
                )
            )
        db.commit()
        return start

    def test_pagination_newest_first(self, db, admin):
        self._seed(db, admin, 7)

        rows, total = list_audit_logs(db, page=1, limit=3)
        assert total == 7
        assert len(rows) == 3
        assert rows[0].created_at > rows[1].created_at > rows[2].created_at

        last_page, _ = list_audit_logs(db, page=3, limit=3)
        assert len(last_page) == 1

    def test_filters(self, db, admin):
        start = self._seed(db, admin, 6)

        _, failed = list_audit_logs(db, action=AuditAction.LOGIN_FAILED)
        assert failed == 2
        _, by_admin = list_audit_logs(db, user_id=admin.user_id)
        assert by_admin == 3
        _, recent = list_audit_logs(db, start=start + timedelta(hours=4))
        assert recent == 2

    def test_limit_is_clamped(self, db, admin):
        self._seed(db, admin, 2)
        rows, total = list_audit_logs(db, page=0, limit=0)
        assert len(rows) == 1
        assert total == 2
