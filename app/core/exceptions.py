"""Error taxonomy for the resume service.

The HTTP layer maps each class to a status code and the response envelope;
services raise them and decide which ones to swallow.
"""
from typing import Dict, List, Optional


class ResumeServiceError(Exception):
    """Base class for errors the resume service raises on purpose."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(ResumeServiceError):
    """Field-level violations on create/update.

    Attributes:
        errors: list of {"field": dotted.path, "message": str}
    """

    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc, prefix: Optional[str] = None) -> "ValidationFailure":
        """Build from a pydantic ValidationError (or anything exposing .errors())."""
        return cls(pydantic_errors_to_fields(exc.errors(), prefix=prefix))


class NotFound(ResumeServiceError):
    """Resource absent, or not owned by the caller (the two are never distinguished)."""

    status_code = 404

    def __init__(self, message: str = "Resume not found"):
        super().__init__(message)


class RenderFailure(ResumeServiceError):
    """The PDF rendering step raised."""

    def __init__(self, message: str = "Failed to render resume PDF"):
        super().__init__(message)


class StoreFailure(ResumeServiceError):
    """Upload to or delete from the artifact store failed."""

    def __init__(self, message: str = "Artifact storage request failed"):
        super().__init__(message)


class ArtifactMissing(ResumeServiceError):
    """Download requested, no artifact stored and generating one failed."""

    def __init__(self, message: str = "Resume PDF is not available"):
        super().__init__(message)


def pydantic_errors_to_fields(errors, prefix: Optional[str] = None) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into [{field, message}] with dotted paths.

    FastAPI prefixes request errors with their source ("body", "query"), which
    is noise for API clients, so that leading segment is dropped.
    """
    out = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        if prefix:
            loc = [prefix, *loc]
        out.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return out
