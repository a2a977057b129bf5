"""Resume lifecycle: build, edit, render, store, download and delete resumes.

The service is handed its collaborators (resume repository, job-seeker
directory, artifact store, renderer). Defaults are the Mongo CRUD modules, the
Cloudinary store and the WeasyPrint renderer; tests swap in doubles.

Failure policy:
  * explicit generate surfaces RenderFailure / StoreFailure
  * download surfaces ArtifactMissing when it has to generate and cannot
  * generation on create/update, counter bumps and artifact deletes are
    best-effort: logged, never raised
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional
from datetime import datetime, timezone
import asyncio
import logging
import re
import time

import pydantic

from app.core.config import settings
from app.core.exceptions import (
    ArtifactMissing,
    NotFound,
    RenderFailure,
    ResumeServiceError,
    StoreFailure,
    ValidationFailure,
)
from app.crud import crud_job_seeker, crud_resume
from app.schemas.JobSeekerSchemas import JobSeekerProfile
from app.schemas.ResumeSchemas import (
    SERVER_MANAGED_FIELDS,
    GeneratedArtifact,
    Resume,
    ResumeCreate,
    ResumeDownload,
    ResumeTemplate,
    ResumeUpdate,
)
from app.services.resume_renderer import render_resume_pdf
from app.tools.file_uploader import CloudinaryArtifactStore

logger = logging.getLogger(__name__)

RESUME_TEMPLATES = [
    ResumeTemplate(id="classic", name="Classic", description="Traditional single-column layout",
                   previewPath="/templates/classic.png"),
    ResumeTemplate(id="modern", name="Modern", description="Clean layout with accent colour rules",
                   previewPath="/templates/modern.png"),
    ResumeTemplate(id="professional", name="Professional", description="Dense layout for experienced candidates",
                   previewPath="/templates/professional.png"),
    ResumeTemplate(id="creative", name="Creative", description="Bolder headings and colour accents",
                   previewPath="/templates/creative.png"),
    ResumeTemplate(id="minimal", name="Minimal", description="Plain typography with generous spacing",
                   previewPath="/templates/minimal.png"),
]

# Sections auto-populate copies from the job-seeker profile
PROFILE_SECTIONS = ("education", "workExperience", "skills", "certifications")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _artifact_filename(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", title or "").strip("_") or "resume"
    return f"{slug}_{int(time.time() * 1000)}.pdf"


def _validate_resume(data: Dict[str, Any]) -> Resume:
    try:
        return Resume.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationFailure.from_pydantic(e) from e


def merge_with_profile(payload: ResumeCreate, profile: JobSeekerProfile) -> Dict[str, Any]:
    """Seed resume content from the job-seeker profile.

    Values given in the request win: personal info field by field, summary
    and list sections as a whole (an empty list counts as not given).
    """
    data = payload.model_dump(exclude={"autoPopulate"})
    provided = payload.model_fields_set

    seeded = {
        "fullName": profile.full_name,
        "email": profile.email,
        "phone": profile.phone,
        "linkedIn": profile.linkedIn,
        "address": profile.address.model_dump() if profile.address else None,
    }
    personal = {k: v for k, v in seeded.items() if v}
    if "personalInfo" in provided:
        given = payload.personalInfo.model_dump(exclude_unset=True)
        personal.update({k: v for k, v in given.items() if v not in (None, "")})
    data["personalInfo"] = personal

    if not payload.summary and profile.summary:
        data["summary"] = profile.summary

    for section in PROFILE_SECTIONS:
        if not getattr(payload, section):
            data[section] = [entry.model_dump() for entry in getattr(profile, section)]
    return data


class ResumeService:
    def __init__(
        self,
        resumes=crud_resume,
        job_seekers=crud_job_seeker,
        store=None,
        renderer: Callable[[Resume], bytes] = render_resume_pdf,
        storage_folder: Optional[str] = None,
    ):
        self.resumes = resumes
        self.job_seekers = job_seekers
        self.store = store if store is not None else CloudinaryArtifactStore()
        self.renderer = renderer
        self.storage_folder = storage_folder or settings.RESUME_STORAGE_FOLDER

    # -- helpers -----------------------------------------------------------

    async def _require(self, job_seeker_id: str, resume_id: str) -> Resume:
        resume = await self.resumes.get_resume(job_seeker_id, resume_id)
        if resume is None:
            raise NotFound()
        return resume

    async def _best_effort(self, action: Awaitable, what: str, resume_id: str) -> bool:
        """Await a side effect whose failure must not reach the caller."""
        try:
            result = await action
        except Exception:
            logger.exception("Best-effort %s failed for resume %s", what, resume_id)
            return False
        return result is not False

    async def _discard_artifact(self, artifact: Optional[GeneratedArtifact], resume_id: str) -> None:
        if artifact is None:
            return
        try:
            deleted = await asyncio.to_thread(self.store.delete, artifact.storageId)
        except Exception:
            logger.exception("Could not delete artifact %s of resume %s", artifact.storageId, resume_id)
            return
        if not deleted:
            logger.info("Artifact %s of resume %s was already gone", artifact.storageId, resume_id)

    async def _produce_artifact(self, resume: Resume) -> GeneratedArtifact:
        pdf = await asyncio.to_thread(self.renderer, resume)
        filename = _artifact_filename(resume.title)
        folder = f"{self.storage_folder}/{resume.jobSeeker}"
        stored = await asyncio.to_thread(self.store.store, pdf, folder, filename)
        return GeneratedArtifact(
            url=stored.url,
            filename=filename,
            storageId=stored.storageId,
            byteSize=stored.byteSize,
            generatedAt=_now(),
        )

    async def _attach_artifact(self, resume: Resume) -> Resume:
        """Render, upload and record a new artifact, then drop the old one.

        The stored reference only changes once the upload has succeeded, so any
        failure leaves the previous artifact in place.
        """
        previous = resume.generatedArtifact
        artifact = await self._produce_artifact(resume)
        try:
            updated = await self.resumes.update_resume_fields(
                resume.jobSeeker, resume.id, {"generatedArtifact": artifact.model_dump(), "updatedAt": _now()}
            )
        except Exception as e:
            # the upload is unreferenced until this write lands
            await self._discard_artifact(artifact, resume.id)
            raise StoreFailure(f"Could not record PDF for resume {resume.id}: {e}") from e
        if updated is None:
            await self._discard_artifact(artifact, resume.id)
            raise NotFound()
        if previous is not None and previous.storageId != artifact.storageId:
            await self._discard_artifact(previous, resume.id)
        return updated

    # -- operations --------------------------------------------------------

    def list_templates(self) -> List[ResumeTemplate]:
        return list(RESUME_TEMPLATES)

    async def create(self, job_seeker_id: str, payload: ResumeCreate) -> Resume:
        profile = await self.job_seekers.get_profile(job_seeker_id)
        if profile is None:
            raise NotFound("Job seeker profile not found")

        if payload.autoPopulate:
            data = merge_with_profile(payload, profile)
        else:
            data = payload.model_dump(exclude={"autoPopulate"})
        now = _now()
        resume = _validate_resume({**data, "jobSeeker": job_seeker_id, "createdAt": now, "updatedAt": now})

        missing = [
            {"field": f"personalInfo.{name}", "message": "Field required"}
            for name in ("fullName", "email")
            if not getattr(resume.personalInfo, name)
        ]
        if missing:
            raise ValidationFailure(missing)

        created = await self.resumes.insert_resume(resume)
        if created.isDefault:
            await self.resumes.clear_default(job_seeker_id, except_id=created.id)
        await self._best_effort(
            self.job_seekers.add_resume_ref(job_seeker_id, created.id), "resume index add", created.id
        )
        logger.info("Created resume %s for job seeker %s", created.id, job_seeker_id)

        try:
            created = await self._attach_artifact(created)
        except ResumeServiceError as e:
            logger.warning("Resume %s created without a PDF: %s", created.id, e.message)
        return created

    async def update(self, job_seeker_id: str, resume_id: str, payload: ResumeUpdate) -> Resume:
        current = await self._require(job_seeker_id, resume_id)

        changes = {k: v for k, v in payload.changes().items() if k not in SERVER_MANAGED_FIELDS}
        merged = current.model_dump()
        merged.update(changes)
        validated = _validate_resume(merged)

        fields = validated.model_dump(include=set(changes))
        fields["updatedAt"] = _now()
        if validated.isDefault and changes.get("isDefault"):
            await self.resumes.clear_default(job_seeker_id, except_id=resume_id)
        updated = await self.resumes.update_resume_fields(job_seeker_id, resume_id, fields)
        if updated is None:
            raise NotFound()

        if payload.regeneratePdf:
            try:
                updated = await self._attach_artifact(updated)
            except ResumeServiceError as e:
                logger.warning("PDF regeneration failed for resume %s: %s", resume_id, e.message)
        return updated

    async def get(self, job_seeker_id: str, resume_id: str) -> Resume:
        return await self._require(job_seeker_id, resume_id)

    async def preview(self, job_seeker_id: str, resume_id: str) -> Resume:
        return await self._require(job_seeker_id, resume_id)

    async def list_resumes(self, job_seeker_id: str) -> List[Resume]:
        return await self.resumes.list_resumes(job_seeker_id)

    async def record_view(self, job_seeker_id: str, resume_id: str) -> bool:
        return await self._best_effort(
            self.resumes.increment_stat(job_seeker_id, resume_id, "views"), "view count", resume_id
        )

    async def record_usage(self, job_seeker_id: str, resume_id: str) -> bool:
        """Called when a resume is attached to a job application."""
        return await self._best_effort(
            self.resumes.increment_stat(job_seeker_id, resume_id, "timesUsedInApplications"),
            "usage count",
            resume_id,
        )

    async def generate(self, job_seeker_id: str, resume_id: str) -> GeneratedArtifact:
        resume = await self._require(job_seeker_id, resume_id)
        updated = await self._attach_artifact(resume)
        return updated.generatedArtifact

    async def download(self, job_seeker_id: str, resume_id: str) -> ResumeDownload:
        resume = await self._require(job_seeker_id, resume_id)
        if resume.generatedArtifact is None:
            try:
                resume = await self._attach_artifact(resume)
            except (RenderFailure, StoreFailure) as e:
                raise ArtifactMissing(f"Resume PDF is not available: {e.message}") from e

        await self._best_effort(
            self.resumes.increment_stat(job_seeker_id, resume_id, "downloads"), "download count", resume_id
        )
        artifact = resume.generatedArtifact
        return ResumeDownload(downloadUrl=artifact.url, filename=artifact.filename)

    async def set_default(self, job_seeker_id: str, resume_id: str) -> Resume:
        # Two writes, not atomic: concurrent calls can briefly leave two defaults
        await self._require(job_seeker_id, resume_id)
        await self.resumes.clear_default(job_seeker_id, except_id=resume_id)
        updated = await self.resumes.update_resume_fields(
            job_seeker_id, resume_id, {"isDefault": True, "updatedAt": _now()}
        )
        if updated is None:
            raise NotFound()
        return updated

    async def delete(self, job_seeker_id: str, resume_id: str) -> None:
        resume = await self._require(job_seeker_id, resume_id)
        await self._discard_artifact(resume.generatedArtifact, resume_id)
        if not await self.resumes.delete_resume(job_seeker_id, resume_id):
            raise NotFound()
        await self._best_effort(
            self.job_seekers.remove_resume_ref(job_seeker_id, resume_id), "resume index removal", resume_id
        )
        logger.info("Deleted resume %s of job seeker %s", resume_id, job_seeker_id)
