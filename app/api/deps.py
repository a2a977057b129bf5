from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.crud import crud_job_seeker
from app.schemas.JobSeekerSchemas import JobSeekerProfile
from app.services.resume_service import ResumeService


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Id of the authenticated user.

    Tokens are verified upstream by the auth layer, which forwards the user id
    in the X-User-Id header.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return x_user_id


async def get_current_job_seeker(user_id: str = Depends(get_current_user_id)) -> JobSeekerProfile:
    profile = await crud_job_seeker.get_profile_by_user(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access restricted to job seekers")
    return profile


@lru_cache
def get_resume_service() -> ResumeService:
    return ResumeService()
