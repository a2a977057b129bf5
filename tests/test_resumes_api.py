"""
HTTP-level tests for /api/v1/resume using FastAPI's TestClient with the
service and caller identity overridden.
"""
import pytest
from fastapi.testclient import TestClient

from app.api import deps
from main import app as fastapi_app

BASE = "/api/v1/resume"

BUILD_BODY = {
    "title": "Platform Engineer",
    "personalInfo": {"fullName": "Asha Verma", "email": "asha@example.com"},
    "skills": [{"name": "Python", "level": "Expert"}],
}


@pytest.fixture
def caller(profile):
    return {"profile": profile}


@pytest.fixture
def client(service, caller):
    fastapi_app.dependency_overrides[deps.get_current_job_seeker] = lambda: caller["profile"]
    fastapi_app.dependency_overrides[deps.get_resume_service] = lambda: service
    with_client = TestClient(fastapi_app)
    yield with_client
    fastapi_app.dependency_overrides.clear()


def _build(client, **overrides):
    body = {**BUILD_BODY, **overrides}
    response = client.post(f"{BASE}/build", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["resume"]


def test_templates(client):
    response = client.get(f"{BASE}/templates")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert {t["id"] for t in body["data"]["templates"]} == {"classic", "modern", "professional", "creative", "minimal"}


def test_build_returns_created_envelope(client, profile):
    resume = _build(client)

    assert resume["jobSeeker"] == profile.id
    assert resume["title"] == "Platform Engineer"
    assert resume["generatedArtifact"]["url"].startswith("https://")
    assert resume["stats"] == {"views": 0, "downloads": 0, "timesUsedInApplications": 0}


def test_build_auto_populate(client):
    response = client.post(f"{BASE}/build", json={"autoPopulate": True})

    assert response.status_code == 201
    resume = response.json()["data"]["resume"]
    assert resume["personalInfo"]["fullName"] == "Asha Verma"
    assert len(resume["education"]) == 2
    assert [s["name"] for s in resume["skills"]] == ["Python"]


def test_build_validation_errors_are_400_with_fields(client):
    body = {**BUILD_BODY, "skills": [{"name": "Python", "level": "Wizard"}], "title": "x" * 101}

    response = client.post(f"{BASE}/build", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    fields = {e["field"] for e in payload["errors"]}
    assert "title" in fields
    assert "skills.0.level" in fields


def test_build_missing_name_is_400(client):
    response = client.post(f"{BASE}/build", json={"personalInfo": {"email": "a@b.c"}})

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "personalInfo.fullName", "message": "Field required"}]


def test_get_counts_views_after_response(client, repo):
    resume = _build(client)

    first = client.get(f"{BASE}/{resume['id']}")
    second = client.get(f"{BASE}/{resume['id']}")

    assert first.status_code == 200
    assert first.json()["data"]["resume"]["stats"]["views"] == 0
    assert second.json()["data"]["resume"]["stats"]["views"] == 1
    assert repo.rows[resume["id"]].stats.views == 2


def test_preview_does_not_count(client, repo):
    resume = _build(client)

    response = client.get(f"{BASE}/{resume['id']}/preview")

    assert response.status_code == 200
    assert repo.rows[resume["id"]].stats.views == 0


def test_list(client):
    _build(client, title="One")
    _build(client, title="Two")

    response = client.get(f"{BASE}/list")

    assert response.status_code == 200
    assert {r["title"] for r in response.json()["data"]["resumes"]} == {"One", "Two"}


def test_update_partial(client):
    resume = _build(client)

    response = client.put(f"{BASE}/{resume['id']}", json={"title": "Renamed", "stats": {"views": 50}})

    assert response.status_code == 200
    updated = response.json()["data"]["resume"]
    assert updated["title"] == "Renamed"
    assert updated["skills"] == resume["skills"]
    assert updated["stats"]["views"] == 0


def test_update_with_failing_regeneration_still_succeeds(client, renderer):
    resume = _build(client)
    renderer.fail = True

    response = client.put(f"{BASE}/{resume['id']}", json={"summary": "Updated", "regeneratePdf": True})

    assert response.status_code == 200
    updated = response.json()["data"]["resume"]
    assert updated["summary"] == "Updated"
    assert updated["generatedArtifact"] == resume["generatedArtifact"]


def test_generate_pdf_failure_is_500(client, renderer):
    resume = _build(client)
    renderer.fail = True

    response = client.post(f"{BASE}/{resume['id']}/generate-pdf")

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_generate_pdf(client):
    resume = _build(client)

    response = client.post(f"{BASE}/{resume['id']}/generate-pdf")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pdfUrl"] == data["pdf"]["url"]
    assert data["pdfUrl"] != resume["generatedArtifact"]["url"]


def test_download(client, repo):
    resume = _build(client)

    response = client.post(f"{BASE}/{resume['id']}/download")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["downloadUrl"] == resume["generatedArtifact"]["url"]
    assert data["filename"].endswith(".pdf")
    assert repo.rows[resume["id"]].stats.downloads == 1


def test_set_default(client, repo):
    a = _build(client, title="A")
    b = _build(client, title="B")
    client.post(f"{BASE}/{a['id']}/set-default")

    response = client.post(f"{BASE}/{b['id']}/set-default")

    assert response.status_code == 200
    assert response.json()["data"]["resume"]["isDefault"] is True
    assert repo.rows[a["id"]].isDefault is False


def test_delete(client, repo):
    resume = _build(client)

    response = client.delete(f"{BASE}/{resume['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Resume deleted successfully", "data": None, "errors": None}
    assert resume["id"] not in repo.rows
    assert client.get(f"{BASE}/{resume['id']}").status_code == 404


def test_other_owner_gets_404(client, caller, other_profile):
    resume = _build(client)
    caller["profile"] = other_profile

    for method, path in [
        ("get", f"{BASE}/{resume['id']}"),
        ("get", f"{BASE}/{resume['id']}/preview"),
        ("put", f"{BASE}/{resume['id']}"),
        ("delete", f"{BASE}/{resume['id']}"),
        ("post", f"{BASE}/{resume['id']}/download"),
        ("post", f"{BASE}/{resume['id']}/generate-pdf"),
        ("post", f"{BASE}/{resume['id']}/set-default"),
    ]:
        kwargs = {"json": {"title": "x"}} if method == "put" else {}
        response = getattr(client, method)(path, **kwargs)
        assert response.status_code == 404, path
        assert response.json()["message"] == "Resume not found"


def test_missing_identity_is_401(service):
    fastapi_app.dependency_overrides[deps.get_resume_service] = lambda: service
    try:
        response = TestClient(fastapi_app).get(f"{BASE}/list")
    finally:
        fastapi_app.dependency_overrides.clear()

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_non_job_seeker_is_403(service, directory, monkeypatch):
    monkeypatch.setattr(deps.crud_job_seeker, "get_profile_by_user", directory.get_profile_by_user)
    fastapi_app.dependency_overrides[deps.get_resume_service] = lambda: service
    try:
        client = TestClient(fastapi_app)
        forbidden = client.get(f"{BASE}/list", headers={"X-User-Id": "employer-9"})
        allowed = client.get(f"{BASE}/list", headers={"X-User-Id": "user-1"})
    finally:
        fastapi_app.dependency_overrides.clear()

    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "Access restricted to job seekers"
    assert allowed.status_code == 200
