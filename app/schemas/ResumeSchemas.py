import pydantic
from pydantic import BaseModel, Field
from typing import List, Optional, Any, Literal
from datetime import datetime


SectionKey = Literal[
    "summary",
    "education",
    "workExperience",
    "skills",
    "certifications",
    "projects",
    "languages",
    "customSections",
]

SkillLevel = Literal["Beginner", "Intermediate", "Advanced", "Expert"]
LanguageProficiency = Literal["Basic", "Intermediate", "Fluent", "Native"]
FontFamily = Literal["Arial", "Times New Roman", "Calibri", "Georgia", "Helvetica"]
Spacing = Literal["compact", "normal", "relaxed"]

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class ResumeModel(BaseModel):
    """Common config: trim strings the way the legacy Mongo schema did."""
    model_config = pydantic.ConfigDict(str_strip_whitespace=True)


class Address(ResumeModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zipCode: Optional[str] = None


class PersonalInfo(ResumeModel):
    # fullName/email are enforced on create; stored records may lack them
    fullName: Optional[str] = Field(default=None, max_length=120)
    email: Optional[str] = Field(default=None, max_length=254)
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[Address] = None
    linkedIn: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None


class EducationEntry(ResumeModel):
    degree: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    completionYear: int = Field(..., ge=1900, le=2100)
    grade: Optional[str] = None
    visible: bool = True


class WorkExperienceEntry(ResumeModel):
    position: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    startDate: datetime
    endDate: Optional[datetime] = None
    isCurrent: bool = False
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)
    visible: bool = True


class SkillEntry(ResumeModel):
    name: str = Field(..., min_length=1)
    level: SkillLevel = "Intermediate"
    visible: bool = True


class CertificationEntry(ResumeModel):
    name: str = Field(..., min_length=1)
    issuer: str = Field(..., min_length=1)
    issueDate: datetime
    expiryDate: Optional[datetime] = None
    credentialId: Optional[str] = None
    credentialUrl: Optional[str] = None
    visible: bool = True


class ProjectEntry(ResumeModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None, max_length=500)
    technologies: List[str] = Field(default_factory=list)
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    url: Optional[str] = None
    visible: bool = True


class LanguageEntry(ResumeModel):
    name: str = Field(..., min_length=1)
    proficiency: LanguageProficiency = "Intermediate"
    visible: bool = True


class CustomSection(ResumeModel):
    title: str = Field(..., min_length=1)
    content: Optional[str] = None
    items: Optional[List[str]] = None
    visible: bool = True


class Styling(ResumeModel):
    fontFamily: FontFamily = "Arial"
    fontSize: int = Field(default=11, ge=10, le=14)
    primaryColor: str = Field(default="#000000", pattern=HEX_COLOR)
    accentColor: str = Field(default="#2563eb", pattern=HEX_COLOR)
    spacing: Spacing = "normal"


class GeneratedArtifact(BaseModel):
    url: str
    filename: str
    storageId: str
    byteSize: int = 0
    generatedAt: datetime


class ResumeStats(BaseModel):
    views: int = Field(default=0, ge=0)
    downloads: int = Field(default=0, ge=0)
    timesUsedInApplications: int = Field(default=0, ge=0)


def _reject_duplicate_sections(v: List[str]) -> List[str]:
    seen = set()
    for key in v:
        if key in seen:
            raise ValueError(f"section '{key}' listed more than once")
        seen.add(key)
    return v


class ResumeContent(ResumeModel):
    """Owner-editable part of a resume."""
    title: str = Field(default="My Resume", min_length=1, max_length=100)
    personalInfo: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: Optional[str] = Field(default=None, max_length=1000)
    education: List[EducationEntry] = Field(default_factory=list)
    workExperience: List[WorkExperienceEntry] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    languages: List[LanguageEntry] = Field(default_factory=list)
    customSections: List[CustomSection] = Field(default_factory=list)
    sectionOrder: List[SectionKey] = Field(default_factory=list)
    styling: Styling = Field(default_factory=Styling)
    isDefault: bool = False
    isPublic: bool = False

    @pydantic.field_validator("sectionOrder")
    @classmethod
    def _unique_sections(cls, v: List[str]) -> List[str]:
        return _reject_duplicate_sections(v)


# Fields only the server may write
SERVER_MANAGED_FIELDS = frozenset(
    {"id", "_id", "jobSeeker", "createdAt", "updatedAt", "stats", "generatedArtifact"}
)


class Resume(ResumeContent):
    """A stored resume as the service and API see it."""
    id: Optional[str] = None
    jobSeeker: str
    generatedArtifact: Optional[GeneratedArtifact] = None
    stats: ResumeStats = Field(default_factory=ResumeStats)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ResumeCreate(ResumeContent):
    """POST /resume/build body. Unknown and server-managed keys are ignored."""
    autoPopulate: bool = False

    model_config = pydantic.ConfigDict(str_strip_whitespace=True, extra="ignore")


class ResumeUpdate(ResumeModel):
    """PUT /resume/{id} body. Only keys present in the request are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    personalInfo: Optional[PersonalInfo] = None
    summary: Optional[str] = Field(default=None, max_length=1000)
    education: Optional[List[EducationEntry]] = None
    workExperience: Optional[List[WorkExperienceEntry]] = None
    skills: Optional[List[SkillEntry]] = None
    certifications: Optional[List[CertificationEntry]] = None
    projects: Optional[List[ProjectEntry]] = None
    languages: Optional[List[LanguageEntry]] = None
    customSections: Optional[List[CustomSection]] = None
    sectionOrder: Optional[List[SectionKey]] = None
    styling: Optional[Styling] = None
    isDefault: Optional[bool] = None
    isPublic: Optional[bool] = None
    regeneratePdf: bool = False

    model_config = pydantic.ConfigDict(str_strip_whitespace=True, extra="ignore")

    @pydantic.field_validator("sectionOrder")
    @classmethod
    def _unique_sections(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _reject_duplicate_sections(v) if v is not None else v

    def changes(self) -> dict:
        """Explicitly supplied fields, minus the regenerate flag."""
        return self.model_dump(exclude_unset=True, exclude={"regeneratePdf"})


class ResumeTemplate(BaseModel):
    id: str
    name: str
    description: str
    previewPath: str


class ResumeDownload(BaseModel):
    downloadUrl: str
    filename: str


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel):
    """Envelope returned by every /resume endpoint: { success, message, data?, errors? }"""
    success: bool = True
    message: str = ""
    data: Optional[Any] = None
    errors: Optional[List[FieldError]] = None
