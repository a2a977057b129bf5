from typing import Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId

from app.schemas.JobSeekerSchemas import JobSeekerProfile
from app.schemas.resume_documents import JobSeekerDoc


def _to_profile(doc: JobSeekerDoc) -> JobSeekerProfile:
    data = doc.model_dump(exclude={"id", "revision_id"})
    data["id"] = str(doc.id)
    return JobSeekerProfile.model_validate(data)


async def get_profile_by_user(user_id: str) -> Optional[JobSeekerProfile]:
    doc = await JobSeekerDoc.find_one({"userId": user_id})
    return _to_profile(doc) if doc else None


async def get_profile(job_seeker_id: str) -> Optional[JobSeekerProfile]:
    try:
        oid = PydanticObjectId(job_seeker_id)
    except (InvalidId, TypeError):
        return None
    doc = await JobSeekerDoc.get(oid)
    return _to_profile(doc) if doc else None


async def add_resume_ref(job_seeker_id: str, resume_id: str) -> None:
    await JobSeekerDoc.find_one({"_id": PydanticObjectId(job_seeker_id)}).update(
        {"$addToSet": {"resumes": resume_id}}
    )


async def remove_resume_ref(job_seeker_id: str, resume_id: str) -> None:
    await JobSeekerDoc.find_one({"_id": PydanticObjectId(job_seeker_id)}).update(
        {"$pull": {"resumes": resume_id}}
    )
