from .ResumeSchemas import (
	Resume,
	ResumeContent,
	ResumeCreate,
	ResumeUpdate,
	ResumeTemplate,
	ResumeDownload,
	GeneratedArtifact,
	ResumeStats,
	ApiResponse,
)
from .JobSeekerSchemas import JobSeekerProfile
from .resume_documents import ResumeDoc, JobSeekerDoc

__all__ = [
	"Resume",
	"ResumeContent",
	"ResumeCreate",
	"ResumeUpdate",
	"ResumeTemplate",
	"ResumeDownload",
	"GeneratedArtifact",
	"ResumeStats",
	"ApiResponse",
	"JobSeekerProfile",
	"ResumeDoc",
	"JobSeekerDoc",
]
