"""Mongo access for resumes.

Every query that targets a single resume filters by owner as well as id, so a
resume belonging to someone else looks exactly like a missing one.
"""
from typing import Any, Dict, List, Optional

import pymongo
from beanie import PydanticObjectId, UpdateResponse
from bson.errors import InvalidId

from app.schemas.ResumeSchemas import Resume
from app.schemas.resume_documents import ResumeDoc


def _object_id(resume_id: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(resume_id)
    except (InvalidId, TypeError):
        return None


def _owned(job_seeker_id: str, oid: PydanticObjectId) -> Dict[str, Any]:
    return {"_id": oid, "jobSeeker": job_seeker_id}


def _to_resume(doc: ResumeDoc) -> Resume:
    data = doc.model_dump(exclude={"id", "revision_id"})
    data["id"] = str(doc.id)
    return Resume.model_validate(data)


async def get_resume(job_seeker_id: str, resume_id: str) -> Optional[Resume]:
    oid = _object_id(resume_id)
    if oid is None:
        return None
    doc = await ResumeDoc.find_one(_owned(job_seeker_id, oid))
    return _to_resume(doc) if doc else None


async def list_resumes(job_seeker_id: str) -> List[Resume]:
    docs = await ResumeDoc.find({"jobSeeker": job_seeker_id}).sort(
        [("isDefault", pymongo.DESCENDING), ("createdAt", pymongo.DESCENDING)]
    ).to_list()
    return [_to_resume(d) for d in docs]


async def insert_resume(resume: Resume) -> Resume:
    doc = ResumeDoc(**resume.model_dump(exclude={"id"}))
    await doc.insert()
    return _to_resume(doc)


async def update_resume_fields(job_seeker_id: str, resume_id: str, fields: Dict[str, Any]) -> Optional[Resume]:
    """$set the given top-level fields and return the updated resume."""
    oid = _object_id(resume_id)
    if oid is None:
        return None
    doc = await ResumeDoc.find_one(_owned(job_seeker_id, oid)).update(
        {"$set": fields}, response_type=UpdateResponse.NEW_DOCUMENT
    )
    return _to_resume(doc) if doc else None


async def increment_stat(job_seeker_id: str, resume_id: str, stat: str) -> bool:
    oid = _object_id(resume_id)
    if oid is None:
        return False
    result = await ResumeDoc.find_one(_owned(job_seeker_id, oid)).update({"$inc": {f"stats.{stat}": 1}})
    return bool(getattr(result, "matched_count", 0))


async def clear_default(job_seeker_id: str, except_id: Optional[str] = None) -> int:
    """Unset isDefault on every resume of the owner except `except_id`."""
    query: Dict[str, Any] = {"jobSeeker": job_seeker_id, "isDefault": True}
    oid = _object_id(except_id) if except_id else None
    if oid is not None:
        query["_id"] = {"$ne": oid}
    result = await ResumeDoc.find(query).update({"$set": {"isDefault": False}})
    return getattr(result, "modified_count", 0)


async def delete_resume(job_seeker_id: str, resume_id: str) -> bool:
    oid = _object_id(resume_id)
    if oid is None:
        return False
    result = await ResumeDoc.find_one(_owned(job_seeker_id, oid)).delete()
    return bool(getattr(result, "deleted_count", 0))
