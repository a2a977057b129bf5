from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.api.deps import get_current_job_seeker, get_resume_service
from app.schemas.JobSeekerSchemas import JobSeekerProfile
from app.schemas.ResumeSchemas import ApiResponse, ResumeCreate, ResumeUpdate
from app.services.resume_service import ResumeService
from app.tools.serializers import envelope

router = APIRouter()

# Domain errors raised below are turned into the response envelope by the
# exception handlers registered in main.py.


@router.get("/templates", response_model=ApiResponse)
async def list_templates(
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    return envelope("Templates fetched", {"templates": service.list_templates()})


@router.post("/build", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def build_resume(
    payload: ResumeCreate,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    """
    Create a resume. With `autoPopulate`, personal info and sections missing
    from the request are copied from the job-seeker profile. PDF generation is
    attempted right away; if it fails the resume is still created.
    """
    resume = await service.create(job_seeker.id, payload)
    return envelope("Resume created successfully", {"resume": resume})


@router.get("/list", response_model=ApiResponse)
async def list_resumes(
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    resumes = await service.list_resumes(job_seeker.id)
    return envelope("Resumes fetched", {"resumes": resumes})


@router.get("/{resume_id}", response_model=ApiResponse)
async def get_resume(
    resume_id: str,
    background_tasks: BackgroundTasks,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    resume = await service.get(job_seeker.id, resume_id)
    # counted after the response is sent
    background_tasks.add_task(service.record_view, job_seeker.id, resume_id)
    return envelope("Resume fetched", {"resume": resume})


@router.get("/{resume_id}/preview", response_model=ApiResponse)
async def preview_resume(
    resume_id: str,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    resume = await service.preview(job_seeker.id, resume_id)
    return envelope("Resume preview fetched", {"resume": resume})


@router.put("/{resume_id}", response_model=ApiResponse)
async def update_resume(
    resume_id: str,
    payload: ResumeUpdate,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    """
    Partial update: only fields present in the body are replaced. Set
    `regeneratePdf` to rebuild the PDF; a failed rebuild keeps the old PDF and
    does not fail the update.
    """
    resume = await service.update(job_seeker.id, resume_id, payload)
    return envelope("Resume updated successfully", {"resume": resume})


@router.delete("/{resume_id}", response_model=ApiResponse)
async def delete_resume(
    resume_id: str,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    await service.delete(job_seeker.id, resume_id)
    return envelope("Resume deleted successfully")


@router.post("/{resume_id}/generate-pdf", response_model=ApiResponse)
async def generate_pdf(
    resume_id: str,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    artifact = await service.generate(job_seeker.id, resume_id)
    return envelope("Resume PDF generated", {"pdf": artifact, "pdfUrl": artifact.url})


@router.post("/{resume_id}/download", response_model=ApiResponse)
async def download_resume(
    resume_id: str,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    download = await service.download(job_seeker.id, resume_id)
    return envelope("Resume download ready", download)


@router.post("/{resume_id}/set-default", response_model=ApiResponse)
async def set_default_resume(
    resume_id: str,
    job_seeker: JobSeekerProfile = Depends(get_current_job_seeker),
    service: ResumeService = Depends(get_resume_service),
):
    resume = await service.set_default(job_seeker.id, resume_id)
    return envelope("Resume set as default", {"resume": resume})
