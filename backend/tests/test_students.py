"""Tests for student entry and the teacher list."""

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.models.student_registration import StudentRegistration
from conftest import complete_teacher_profile, register_entry, sign_up


class TestStudentEntry:
    """Test the entry form."""

    def test_entry(self, client):
        headers, _ = sign_up(client, "s@example.edu", "student")
        body = register_entry(client, headers, college_code="  abc123 ")
        assert body["registration"]["college_code"] == "ABC123"
        assert body["next_path"] == "/student/feedback"
        assert body["message"] == "Welcome! You can now provide feedback."
        assert client.get("/api/students/entry", headers=headers).json()["name"] == "Sam Student"

    def test_missing_fields(self, client):
        headers, _ = sign_up(client, "s@example.edu", "student")
        resp = client.post("/api/students/entry", headers=headers, json={"name": " ", "semester": 2, "college_code": "X"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please fill all the required fields."

    def test_semester_range(self, client):
        headers, _ = sign_up(client, "s@example.edu", "student")
        resp = client.post("/api/students/entry", headers=headers, json={"name": "A", "semester": 9, "college_code": "X"})
        assert resp.status_code == 400

    def test_student_code_prefix(self, client):
        admin, _ = sign_up(client, "admin@example.edu", "admin")
        assert client.put("/api/admin/student-code", headers=admin, json={"code": "abc"}).json()["code"] == "ABC"

        headers, _ = sign_up(client, "s@example.edu", "student")
        resp = client.post("/api/students/entry", headers=headers, json={"name": "A", "semester": 1, "college_code": "XYZ1"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Your college code should start with ABC"
        register_entry(client, headers, college_code="abc999")

    def test_no_entry_yet(self, client):
        headers, _ = sign_up(client, "s@example.edu", "student")
        assert client.get("/api/students/entry", headers=headers).status_code == 404


class TestTeacherList:
    """Test the teachers a student can review."""

    def test_filtered_by_college_code(self, client):
        t1, _ = sign_up(client, "t1@example.edu", "teacher", first_name="Tara", last_name="Smith")
        complete_teacher_profile(client, t1, college_code="ABC123")
        t2, _ = sign_up(client, "t2@example.edu", "teacher", first_name="Raj", last_name="Jones")
        complete_teacher_profile(client, t2, college_code="OTHER")

        student, _ = sign_up(client, "s@example.edu", "student")
        register_entry(client, student, college_code="ABC123")
        teachers = client.get("/api/students/teachers", headers=student).json()["teachers"]
        assert [t["display_name"] for t in teachers] == ["Tara Smith"]

    def test_duplicates_by_display_name_collapsed(self, client):
        for email in ("a@example.edu", "b@example.edu"):
            headers, _ = sign_up(client, email, "teacher", first_name="Tara", last_name="Smith")
            complete_teacher_profile(client, headers)
        student, _ = sign_up(client, "s@example.edu", "student")
        register_entry(client, student)
        teachers = client.get("/api/students/teachers", headers=student).json()["teachers"]
        assert len(teachers) == 1

    def test_requires_entry(self, client):
        student, _ = sign_up(client, "s@example.edu", "student")
        resp = client.get("/api/students/teachers", headers=student)
        assert resp.status_code == 400


def _locked(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


class TestStoreFailures:
    """Test that database failures outside the feedback service map to store errors."""

    def test_entry_commit_failure_is_unavailable(self, client, db, monkeypatch):
        headers, _ = sign_up(client, "s@example.edu", "student")
        monkeypatch.setattr(Session, "commit", _locked)
        resp = client.post("/api/students/entry", headers=headers, json={
            "name": "Sam", "semester": 3, "college_code": "ABC123",
        })
        assert resp.status_code == 503
        assert resp.json()["kind"] == "unavailable"
        assert resp.json()["detail"] == "The service is temporarily unavailable. Please try again later."
        monkeypatch.undo()
        assert db.query(StudentRegistration).count() == 0

    def test_profile_write_permission_denied(self, client, monkeypatch):
        headers, _ = sign_up(client, "t@example.edu", "teacher")

        def denied(*args, **kwargs):
            raise OperationalError("UPDATE", {}, Exception("permission denied for table teacher_profiles"))

        monkeypatch.setattr(Session, "commit", denied)
        resp = client.put("/api/teachers/profile", headers=headers, json={
            "teacher_id": "T-001", "department": "CS", "subjects": "Algorithms", "courses": "CS301",
        })
        assert resp.status_code == 403
        assert resp.json()["kind"] == "permission_denied"
