"""Tests for the screen access endpoint."""

from app.models.user import User
from conftest import sign_up


class TestScreenAccess:
    """Test guard decisions over HTTP."""

    def test_student_on_teacher_screen(self, client):
        """Student opening a teacher-only screen is redirected with a notice."""
        headers, _ = sign_up(client, "s@example.edu", "student")
        body = client.get("/api/screens/access", params={"path": "/teacher/dashboard"}, headers=headers).json()
        assert body["allowed"] is False
        assert body["state"] == "denied_wrong_role"
        assert body["redirect_to"] == "/teacher/login"
        assert body["notice"] == "You don't have permission to access this page"

    def test_anonymous(self, client):
        body = client.get("/api/screens/access", params={"path": "/admin/dashboard"}).json()
        assert body["state"] == "denied_no_session"
        assert body["redirect_to"] == "/admin/login"

    def test_allowed(self, client):
        headers, _ = sign_up(client, "admin@example.edu", "admin")
        body = client.get("/api/screens/access", params={"path": "/admin/dashboard"}, headers=headers).json()
        assert body["allowed"] is True
        assert body["role"] == "admin"

    def test_public_screen(self, client):
        assert client.get("/api/screens/access", params={"path": "/"}).json()["allowed"] is True

    def test_not_found(self, client):
        resp = client.get("/api/screens/access", params={"path": "/does-not-exist"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Page not found"

    def test_reevaluated_after_role_change(self, client, db):
        """An earlier allow is not reused once the role changes."""
        headers, _ = sign_up(client, "t@example.edu", "teacher")
        params = {"path": "/teacher/dashboard"}
        assert client.get("/api/screens/access", params=params, headers=headers).json()["allowed"] is True

        admin, _ = sign_up(client, "admin@example.edu", "admin")
        teacher = db.query(User).filter(User.email == "t@example.edu").first()
        client.put(f"/api/admin/users/{teacher.id}/role", headers=admin, json={"role": "student"})

        body = client.get("/api/screens/access", params=params, headers=headers).json()
        assert body["allowed"] is False
        assert body["state"] == "denied_wrong_role"

    def test_reevaluated_after_signout(self, client):
        headers, _ = sign_up(client, "t@example.edu", "teacher")
        client.post("/api/auth/signout", headers=headers)
        body = client.get("/api/screens/access", params={"path": "/teacher/profile"}, headers=headers).json()
        assert body["state"] == "denied_no_session"
