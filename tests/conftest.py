"""
Shared fixtures: in-memory stand-ins for Mongo, the job-seeker profile
collection and Cloudinary, plus a ResumeService wired to them.
"""
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from app.core.exceptions import RenderFailure, StoreFailure
from app.schemas.JobSeekerSchemas import JobSeekerProfile
from app.schemas.ResumeSchemas import Resume
from app.services.resume_service import ResumeService
from app.tools.file_uploader import StoredArtifact

FAKE_PDF = b"%PDF-1.7\n% fake resume\n%%EOF\n"


class InMemoryResumes:
    """Same coroutine surface as app.crud.crud_resume."""

    def __init__(self):
        self.rows: Dict[str, Resume] = {}
        self._seq = 0

    def _owned(self, job_seeker_id: str, resume_id: str) -> Optional[Resume]:
        row = self.rows.get(resume_id)
        return row if row is not None and row.jobSeeker == job_seeker_id else None

    async def get_resume(self, job_seeker_id, resume_id):
        row = self._owned(job_seeker_id, resume_id)
        return row.model_copy(deep=True) if row else None

    async def list_resumes(self, job_seeker_id):
        rows = [r for r in self.rows.values() if r.jobSeeker == job_seeker_id]
        rows.sort(key=lambda r: (r.isDefault, r.createdAt), reverse=True)
        return [r.model_copy(deep=True) for r in rows]

    async def insert_resume(self, resume):
        self._seq += 1
        resume_id = f"{self._seq:024x}"
        self.rows[resume_id] = resume.model_copy(update={"id": resume_id}, deep=True)
        return self.rows[resume_id].model_copy(deep=True)

    async def update_resume_fields(self, job_seeker_id, resume_id, fields):
        row = self._owned(job_seeker_id, resume_id)
        if row is None:
            return None
        data = row.model_dump()
        data.update(fields)
        self.rows[resume_id] = Resume.model_validate(data)
        return self.rows[resume_id].model_copy(deep=True)

    async def increment_stat(self, job_seeker_id, resume_id, stat):
        row = self._owned(job_seeker_id, resume_id)
        if row is None:
            return False
        setattr(row.stats, stat, getattr(row.stats, stat) + 1)
        return True

    async def clear_default(self, job_seeker_id, except_id=None):
        cleared = 0
        for row in self.rows.values():
            if row.jobSeeker == job_seeker_id and row.id != except_id and row.isDefault:
                row.isDefault = False
                cleared += 1
        return cleared

    async def delete_resume(self, job_seeker_id, resume_id):
        if self._owned(job_seeker_id, resume_id) is None:
            return False
        del self.rows[resume_id]
        return True


class InMemoryJobSeekers:
    """Same coroutine surface as app.crud.crud_job_seeker."""

    def __init__(self, *profiles: JobSeekerProfile):
        self.profiles = {p.id: p for p in profiles}

    async def get_profile(self, job_seeker_id):
        return self.profiles.get(job_seeker_id)

    async def get_profile_by_user(self, user_id):
        return next((p for p in self.profiles.values() if p.userId == user_id), None)

    async def add_resume_ref(self, job_seeker_id, resume_id):
        refs = self.profiles[job_seeker_id].resumes
        if resume_id not in refs:
            refs.append(resume_id)

    async def remove_resume_ref(self, job_seeker_id, resume_id):
        refs = self.profiles[job_seeker_id].resumes
        if resume_id in refs:
            refs.remove(resume_id)


class FakeArtifactStore:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.fail_store = False
        self.fail_delete = False
        self._seq = 0

    def store(self, data, folder, filename):
        if self.fail_store:
            raise StoreFailure("upload refused")
        self._seq += 1
        storage_id = f"{folder}/{self._seq}-{filename}"
        self.objects[storage_id] = data
        return StoredArtifact(url=f"https://files.example.test/{storage_id}", storageId=storage_id, byteSize=len(data))

    def delete(self, storage_id):
        if self.fail_delete:
            raise StoreFailure("delete refused")
        self.deleted.append(storage_id)
        return self.objects.pop(storage_id, None) is not None


class SwitchableRenderer:
    """Returns a fixed PDF until told to fail."""

    def __init__(self):
        self.fail = False
        self.calls = 0

    def __call__(self, resume):
        self.calls += 1
        if self.fail:
            raise RenderFailure("renderer exploded")
        return FAKE_PDF


@pytest.fixture
def profile():
    return JobSeekerProfile(
        id="65a000000000000000000001",
        userId="user-1",
        firstName="Asha",
        lastName="Verma",
        email="asha@example.com",
        phone="+91 98765 43210",
        linkedIn="https://linkedin.com/in/asha",
        address={"city": "Pune", "state": "MH", "country": "India"},
        summary="Backend engineer who likes boring, reliable systems.",
        education=[
            {"degree": "B.Tech", "field": "Computer Science", "institution": "COEP", "completionYear": 2018},
            {"degree": "M.Tech", "field": "Data Science", "institution": "IIT Bombay", "completionYear": 2020},
        ],
        skills=[{"name": "Python", "level": "Expert"}],
    )


@pytest.fixture
def other_profile():
    return JobSeekerProfile(id="65a000000000000000000002", userId="user-2", firstName="Ravi", lastName="Kumar")


@pytest.fixture
def repo():
    return InMemoryResumes()


@pytest.fixture
def directory(profile, other_profile):
    return InMemoryJobSeekers(profile, other_profile)


@pytest.fixture
def store():
    return FakeArtifactStore()


@pytest.fixture
def renderer():
    return SwitchableRenderer()


@pytest.fixture
def service(repo, directory, store, renderer):
    return ResumeService(
        resumes=repo,
        job_seekers=directory,
        store=store,
        renderer=renderer,
        storage_folder="lifemate/resumes",
    )


@pytest.fixture
def make_resume():
    """Build a Resume value with sensible defaults for renderer tests."""

    def _make(**overrides):
        data = {
            "id": "r-1",
            "jobSeeker": "js-1",
            "title": "Backend Resume",
            "personalInfo": {
                "fullName": "Asha Verma",
                "email": "asha@example.com",
                "phone": "+91 98765 43210",
                "address": {"city": "Pune", "state": "MH", "country": "India"},
                "linkedIn": "https://www.linkedin.com/in/asha/",
                "github": "https://github.com/asha",
            },
            "createdAt": datetime(2024, 1, 1),
        }
        data.update(overrides)
        return Resume.model_validate(data)

    return _make


@pytest.fixture
def weasyprint_available():
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError) as e:
        pytest.skip(f"WeasyPrint unavailable: {e}")
