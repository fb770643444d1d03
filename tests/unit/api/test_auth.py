"""Bearer-token authentication and health endpoint tests."""

import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from crm_assignments.adapters.persistence.database import get_session
from crm_assignments.config import settings
from crm_assignments.infrastructure.api.auth import decode_subject
from crm_assignments.infrastructure.api.dependencies import get_assignment_service, get_user_repo
from crm_assignments.main import app

SECRET = "test-jwt-secret"


def _token(sub, secret=SECRET, aud="authenticated", expires_in=3600):
    now = int(time.time())
    claims = {"sub": sub, "aud": aud, "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, secret, algorithm="HS256")


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


class FakeSession:
    def __init__(self, fail=False):
        self.fail = fail

    async def scalar(self, stmt):
        if self.fail:
            raise ConnectionError("connection refused")
        return 1

    async def commit(self):
        pass


@pytest.fixture
def client(service, user_repo, monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", SECRET)
    monkeypatch.setattr(settings, "jwt_audience", "authenticated")

    async def _session():
        yield FakeSession()

    app.dependency_overrides[get_assignment_service] = lambda: service
    app.dependency_overrides[get_user_repo] = lambda: user_repo
    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


# ─── decode_subject ──────────────────────────────────────────────────


def test_decode_subject_valid():
    assert decode_subject(_token("user-1"), secret=SECRET, audience="authenticated") == "user-1"


def test_decode_subject_wrong_secret():
    assert decode_subject(_token("user-1", secret="other"), secret=SECRET, audience="authenticated") is None


def test_decode_subject_wrong_audience():
    assert decode_subject(_token("user-1", aud="anon"), secret=SECRET, audience="authenticated") is None


def test_decode_subject_audience_check_disabled():
    assert decode_subject(_token("user-1", aud="anon"), secret=SECRET, audience="") == "user-1"


def test_decode_subject_expired():
    assert decode_subject(_token("user-1", expires_in=-60), secret=SECRET, audience="authenticated") is None


def test_decode_subject_without_secret_rejects(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "")
    assert decode_subject(_token("user-1")) is None


def test_decode_subject_garbage():
    assert decode_subject("not-a-jwt", secret=SECRET) is None


# ─── get_current_user via HTTP ───────────────────────────────────────


def test_missing_header_401(client):
    resp = client.get("/api/assignments/stats")

    assert resp.status_code == 401
    assert resp.json() == {
        "success": False, "error": "Missing or invalid authorization header", "code": "UNAUTHORIZED",
    }
    assert resp.headers["www-authenticate"] == "Bearer"


def test_non_bearer_scheme_401(client):
    resp = client.get("/api/assignments/stats", headers={"Authorization": "Basic dXNlcjpwdw=="})
    assert resp.status_code == 401


def test_invalid_token_401(client):
    resp = client.get("/api/assignments/stats", headers=_bearer(_token("admin-1", secret="nope")))
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid or expired token"


def test_unknown_profile_401(client):
    resp = client.get("/api/assignments/stats", headers=_bearer(_token("ghost")))
    assert resp.status_code == 401
    assert resp.json()["error"] == "User profile not found"


def test_deactivated_profile_401(client):
    resp = client.get("/api/assignments/team-members", headers=_bearer(_token("inactive-1")))
    assert resp.status_code == 401
    assert resp.json()["error"] == "User account is deactivated"


def test_admin_token_reads_stats(client):
    resp = client.get("/api/assignments/stats", headers=_bearer(_token("admin-1")))
    assert resp.status_code == 200
    assert resp.json()["totalAssigned"] == 0


def test_member_token_stats_forbidden(client):
    resp = client.get("/api/assignments/stats", headers=_bearer(_token("user-1")))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Admin access required"


def test_member_token_can_assign(client):
    resp = client.post(
        "/api/assignments/assign",
        headers=_bearer(_token("user-1")),
        json={"entityType": "jobs", "entityId": "job-1", "newOwnerId": "user-1", "assignedBy": "user-1"},
    )
    assert resp.status_code == 200


# ─── /health ─────────────────────────────────────────────────────────


def test_health_ok(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "connected", "service": "CRM Assignment Service"}


def test_health_degraded(client):
    async def _broken():
        yield FakeSession(fail=True)

    app.dependency_overrides[get_session] = _broken
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["database"].startswith("error:")
