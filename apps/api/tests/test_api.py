"""End-to-end checks through the FastAPI app."""

from decimal import Decimal

import pyotp

from hrportal.core.security import SESSION_COOKIE_NAME
from hrportal.models.pto import PTOStatus

from conftest import DEFAULT_PASSWORD

PDF_BYTES = b"%PDF-1.4 test stub"


class TestAuthEndpoints:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_login_sets_session_cookie(self, client, employee_user):
        resp = client.post("/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})

        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "EMPLOYEE"
        assert SESSION_COOKIE_NAME in resp.cookies
        set_cookie = resp.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "alice@example.com"

    def test_bad_credentials(self, client, employee_user):
        unknown = client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
        wrong = client.post("/auth/login", json={"email": "alice@example.com", "password": "x"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"detail": "Invalid email or password"}

    def test_rate_limited_login_returns_429(self, client, employee_user):
        for _ in range(5):
            client.post("/auth/login", json={"email": "alice@example.com", "password": "x"})

        resp = client.post("/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 429
        assert int(resp.headers["retry-after"]) == resp.json()["retry_after"]

    def test_me_requires_session(self, client):
        assert client.get("/auth/me").status_code == 401
        assert client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    def test_logout_clears_cookie(self, client, employee_user):
        client.post("/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        resp = client.post("/auth/logout")
        assert resp.status_code == 200
        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith(SESSION_COOKIE_NAME)
        assert "max-age=0" in set_cookie

    def test_forgot_password_is_generic(self, client, employee_user, email_sender):
        known = client.post("/auth/forgot-password", json={"email": "alice@example.com"})
        unknown = client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(email_sender.sent) == 1

    def test_two_factor_login_flow(self, client, employee_user, login):
        headers = login("alice@example.com")
        setup = client.post("/auth/2fa/setup", headers=headers).json()
        verify = client.post(
            "/auth/2fa/verify", headers=headers, json={"code": pyotp.TOTP(setup["secret"]).now()}
        )
        assert verify.status_code == 200
        assert len(verify.json()["backup_codes"]) == 8

        resp = client.post("/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 401
        assert resp.json()["two_factor_required"] is True

        resp = client.post(
            "/auth/login",
            json={
                "email": "alice@example.com",
                "password": DEFAULT_PASSWORD,
                "totp_code": pyotp.TOTP(setup["secret"]).now(),
            },
        )
        assert resp.status_code == 200
        assert resp.json()["user"]["totp_enabled"] is True


class TestRoleChecks:

    def test_employee_cannot_use_admin_routes(self, client, employee_user, login):
        headers = login("alice@example.com")
        resp = client.get("/admin/pto", headers=headers)
        assert resp.status_code == 403
        assert resp.json() == {"detail": "This endpoint requires the admin role"}

    def test_admin_has_no_employee_portal(self, client, admin, login):
        headers = login("hr@example.com")
        assert client.get("/pto", headers=headers).status_code == 403


class TestPtoEndpoints:

    def test_request_approve_revoke(self, client, admin, employee_user, login):
        employee_headers = login("alice@example.com")
        admin_headers = login("hr@example.com")

        created = client.post(
            "/pto",
            headers=employee_headers,
            json={"type": "VACATION", "start_date": "2026-07-06", "end_date": "2026-07-08", "reason": "Beach"},
        )
        assert created.status_code == 200
        request_id = created.json()["request_id"]
        assert Decimal(created.json()["total_days"]) == Decimal("3")

        pending = client.get("/admin/pto", headers=admin_headers, params={"status": "PENDING"}).json()
        assert [r["request_id"] for r in pending] == [request_id]

        approved = client.post(f"/admin/pto/{request_id}/approve", headers=admin_headers, json={})
        assert approved.json()["status"] == PTOStatus.APPROVED.value

        mine = client.get("/pto", headers=employee_headers).json()
        assert Decimal(mine["balance"]["VACATION"]["remaining"]) == Decimal("7")

        blank = client.post(f"/admin/pto/{request_id}/revoke", headers=admin_headers, json={"reason": "  "})
        assert blank.status_code == 400

        revoked = client.post(
            f"/admin/pto/{request_id}/revoke", headers=admin_headers, json={"reason": "scheduling conflict"}
        )
        assert revoked.json()["status"] == "DENIED"
        assert revoked.json()["was_revoked"] is True

        mine = client.get("/pto", headers=employee_headers).json()
        assert Decimal(mine["balance"]["VACATION"]["remaining"]) == Decimal("10")

    def test_insufficient_balance(self, client, employee_user, login):
        resp = client.post(
            "/pto",
            headers=login("alice@example.com"),
            json={"type": "PERSONAL", "start_date": "2026-07-01", "end_date": "2026-07-04"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Insufficient personal days")

    def test_cancel_and_conflict(self, client, employee_user, login):
        headers = login("alice@example.com")
        request_id = client.post(
            "/pto", headers=headers, json={"type": "SICK", "start_date": "2026-02-02", "end_date": "2026-02-02"}
        ).json()["request_id"]

        assert client.delete(f"/pto/{request_id}", headers=headers).json()["status"] == "CANCELLED"
        again = client.delete(f"/pto/{request_id}", headers=headers)
        assert again.status_code == 409


class TestAdminEndpoints:

    def test_invite_then_employee_onboards(self, client, admin, login, storage):
        admin_headers = login("hr@example.com")
        invited = client.post(
            "/admin/employees", headers=admin_headers, json={"email": "new@example.com", "password": "first-pass-1"}
        )
        assert invited.status_code == 200

        headers = login("new@example.com", password="first-pass-1")
        saved = client.put("/portal/profile", headers=headers, json={"full_name": "New Hire"})
        assert saved.json()["onboarding_status"] == "IN_PROGRESS"

        incomplete = client.post("/portal/onboarding/complete", headers=headers)
        assert incomplete.status_code == 400

        logs = client.get("/admin/audit-logs", headers=admin_headers, params={"limit": 2}).json()
        assert logs["pagination"]["limit"] == 2
        assert logs["pagination"]["total"] >= 3
        assert len(logs["logs"]) == 2

    def test_paystub_upload_and_view(self, client, admin, employee_user, login, storage):
        employee_id = str(employee_user.employee_profile.employee_id)
        admin_headers = login("hr@example.com")

        resp = client.post(
            "/admin/paystubs",
            headers=admin_headers,
            data={
                "employee_id": employee_id,
                "pay_period_start": "2026-03-01",
                "pay_period_end": "2026-03-15",
                "pay_date": "2026-03-20",
                "gross_pay": "1500.00",
                "net_pay": "1180.25",
            },
            files={"file": ("march.pdf", PDF_BYTES, "application/pdf")},
        )
        assert resp.status_code == 200, resp.text

        stubs = client.get("/portal/paystubs", headers=login("alice@example.com")).json()
        assert [s["file_name"] for s in stubs] == ["march.pdf"]

    def test_employee_cannot_raise_own_wage_after_onboarding(self, client, admin, employee_user, login, storage):
        employee_id = str(employee_user.employee_profile.employee_id)
        admin_headers = login("hr@example.com")
        details = {
            "full_name": "Alice Example",
            "date_of_birth": "1990-04-12",
            "phone": "555-0100",
            "address": "1 Main St",
            "emergency_contact_name": "Bob Example",
            "emergency_contact_relationship": "Sibling",
            "emergency_contact_phone": "555-0101",
            "role_title": "Coach",
            "start_date": "2026-01-05",
            "employment_type": "HOURLY",
            "wage": "21.50",
        }
        assert client.put(f"/admin/employees/{employee_id}/onboarding", headers=admin_headers, json=details).status_code == 200
        completed = client.post(f"/admin/employees/{employee_id}/onboarding/complete", headers=admin_headers)
        assert completed.json()["onboarding_status"] == "COMPLETED"

        headers = login("alice@example.com")
        resp = client.put("/portal/profile", headers=headers, json={"wage": "999999", "role_title": "CEO"})
        assert resp.status_code == 403

        profile = client.get("/portal/profile", headers=headers).json()
        assert Decimal(profile["wage"]) == Decimal("21.50")
        assert profile["role_title"] == "Coach"

        moved = client.put("/portal/profile", headers=headers, json={"address": "2 Side St"})
        assert moved.status_code == 200
        assert moved.json()["address"] == "2 Side St"

    def test_duplicate_invite_conflicts(self, client, admin, employee_user, login):
        resp = client.post(
            "/admin/employees",
            headers=login("hr@example.com"),
            json={"email": "alice@example.com", "password": "first-pass-1"},
        )
        assert resp.status_code == 409


class TestPortalExtras:

    def test_payment_details_are_masked(self, client, employee_user, login):
        headers = login("alice@example.com")
        assert client.get("/portal/payment", headers=headers).json() is None

        resp = client.put(
            "/portal/payment",
            headers=headers,
            json={
                "bank_name": "First Example Bank",
                "account_type": "CHECKING",
                "routing_number": "021000021",
                "account_number": "000123456789",
            },
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["last4_account"] == "6789"
        assert body["confirmed"] is True
        assert "000123456789" not in resp.text
        assert "021000021" not in resp.text

        assert client.get("/portal/payment", headers=headers).json()["last4_account"] == "6789"

    def test_payment_validation_and_role(self, client, admin, employee_user, login):
        headers = login("alice@example.com")
        short = client.put(
            "/portal/payment",
            headers=headers,
            json={"bank_name": "Bank", "account_type": "SAVINGS", "routing_number": "1234", "account_number": "98765"},
        )
        assert short.status_code == 400
        assert short.json() == {"detail": "Routing number must be 9 digits"}

        missing = client.put("/portal/payment", headers=headers, json={"bank_name": "Bank"})
        assert missing.json() == {"detail": "All fields are required"}

        assert client.get("/portal/payment", headers=login("hr@example.com")).status_code == 403

    def test_admin_uploads_document_employee_lists_it(self, client, admin, employee_user, login, storage):
        employee_id = str(employee_user.employee_profile.employee_id)
        admin_headers = login("hr@example.com")

        resp = client.post(
            f"/admin/employees/{employee_id}/documents",
            headers=admin_headers,
            data={"document_type": "PASSPORT"},
            files={"file": ("passport.pdf", PDF_BYTES, "application/pdf")},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["document_type"] == "PASSPORT"

        bad = client.post(
            f"/admin/employees/{employee_id}/documents",
            headers=admin_headers,
            data={"document_type": "PASSPORT"},
            files={"file": ("passport.exe", b"MZ", "application/octet-stream")},
        )
        assert bad.status_code == 400

        admin_view = client.get(f"/admin/employees/{employee_id}/documents", headers=admin_headers).json()
        assert len(admin_view) == 1

        mine = client.get("/portal/documents", headers=login("alice@example.com")).json()
        assert [d["file_name"] for d in mine] == ["passport.pdf"]

        logs = client.get("/admin/audit-logs", headers=admin_headers, params={"action": "DOCUMENT_VIEW"}).json()
        assert logs["pagination"]["total"] == 1

    def test_employee_cannot_upload_documents(self, client, employee_user, login):
        employee_id = str(employee_user.employee_profile.employee_id)
        resp = client.post(
            f"/admin/employees/{employee_id}/documents",
            headers=login("alice@example.com"),
            data={"document_type": "ID"},
            files={"file": ("id.png", b"\x89PNG", "image/png")},
        )
        assert resp.status_code == 403

    def test_announcement_lifecycle(self, client, admin, employee_user, login):
        admin_headers = login("hr@example.com")
        created = client.post(
            "/admin/announcements",
            headers=admin_headers,
            json={"title": "New schedule", "body": "Classes start at 6am from next week."},
        )
        assert created.status_code == 200, created.text
        announcement_id = created.json()["announcement_id"]
        assert created.json()["is_active"] is True

        assert client.get(f"/admin/announcements/{announcement_id}", headers=admin_headers).json()["title"] == "New schedule"
        assert len(client.get("/admin/announcements", headers=admin_headers).json()) == 1

        employee_headers = login("alice@example.com")
        feed = client.get("/portal/announcements", headers=employee_headers).json()
        assert [a["title"] for a in feed] == ["New schedule"]
        assert client.get("/admin/announcements", headers=employee_headers).status_code == 403

        hidden = client.put(
            f"/admin/announcements/{announcement_id}",
            headers=admin_headers,
            json={"title": "New schedule", "body": "Classes start at 6am from next week.", "is_active": False},
        )
        assert hidden.json()["is_active"] is False
        assert client.get("/portal/announcements", headers=employee_headers).json() == []

        assert client.delete(f"/admin/announcements/{announcement_id}", headers=admin_headers).status_code == 200
        gone = client.get(f"/admin/announcements/{announcement_id}", headers=admin_headers)
        assert gone.status_code == 404
        assert gone.json() == {"detail": "Announcement not found"}

    def test_short_announcement_body_is_rejected(self, client, admin, login):
        resp = client.post(
            "/admin/announcements",
            headers=login("hr@example.com"),
            json={"title": "Hi", "body": "short"},
        )
        assert resp.status_code == 400
