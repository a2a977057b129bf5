from pydantic import BaseModel, Field
from typing import List, Optional

from app.schemas.ResumeSchemas import (
    Address,
    CertificationEntry,
    EducationEntry,
    SkillEntry,
    WorkExperienceEntry,
)


class JobSeekerProfileBase(BaseModel):
    """The slice of the job-seeker profile the resume builder reads.

    The profile itself is owned by the job-seeker module; resumes only read it
    for auto-populate and keep their ids in `resumes`.
    """
    userId: str
    firstName: str = ""
    lastName: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedIn: Optional[str] = None
    address: Optional[Address] = None
    summary: Optional[str] = None
    education: List[EducationEntry] = Field(default_factory=list)
    workExperience: List[WorkExperienceEntry] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)
    resumes: List[str] = Field(default_factory=list)


class JobSeekerProfile(JobSeekerProfileBase):
    id: str

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}".strip()
