from beanie import Document, Indexed
from pydantic import Field
from typing import Optional
from datetime import datetime
import pymongo

from app.schemas.ResumeSchemas import ResumeContent, GeneratedArtifact, ResumeStats
from app.schemas.JobSeekerSchemas import JobSeekerProfileBase


class ResumeDoc(Document, ResumeContent):
    """Mongo persistence shape of a built resume (collection `resumes`)."""
    jobSeeker: Indexed(str)
    generatedArtifact: Optional[GeneratedArtifact] = None
    stats: ResumeStats = Field(default_factory=ResumeStats)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Settings:
        name = "resumes"
        indexes = [
            [("jobSeeker", pymongo.ASCENDING), ("isDefault", pymongo.ASCENDING)],
            [("jobSeeker", pymongo.ASCENDING), ("createdAt", pymongo.DESCENDING)],
        ]


class JobSeekerDoc(Document, JobSeekerProfileBase):
    """Read-mostly view of the job-seeker profile collection."""
    userId: Indexed(str, unique=True)

    class Settings:
        name = "jobseekers"
