from typing import Any, Dict, List, Optional
from datetime import datetime, date

from bson import ObjectId
from pydantic import BaseModel


def _convert_value(v: Any) -> Any:
    """Convert a single value to a JSON-friendly representation."""
    # ObjectId -> str
    if isinstance(v, ObjectId):
        return str(v)
    # datetimes -> isoformat
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    return v


def serialize(obj: Any) -> Any:
    """Turn models, ObjectIds and datetimes (at any depth) into JSON-friendly values."""
    if isinstance(obj, BaseModel):
        obj = obj.model_dump()
    if isinstance(obj, dict):
        return {k: serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [serialize(x) for x in obj]
    return _convert_value(obj)


def envelope(
    message: str,
    data: Any = None,
    success: bool = True,
    errors: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Response body shared by every endpoint: { success, message, data?, errors? }"""
    body: Dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = serialize(data)
    if errors:
        body["errors"] = errors
    return body
