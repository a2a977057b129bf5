# In app/tools/file_uploader.py
import logging
from dataclasses import dataclass

import cloudinary
import cloudinary.uploader

from app.core.config import settings
from app.core.exceptions import StoreFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredArtifact:
    url: str
    storageId: str
    byteSize: int


def configure_cloudinary():
    """Configures the Cloudinary client with credentials from settings.

    Keys:
      CLOUDINARY_CLOUD_NAME
      CLOUDINARY_API_KEY
      CLOUDINARY_API_SECRET
    """
    creds = {
        "CLOUDINARY_CLOUD_NAME": settings.CLOUDINARY_CLOUD_NAME,
        "CLOUDINARY_API_KEY": settings.CLOUDINARY_API_KEY,
        "CLOUDINARY_API_SECRET": settings.CLOUDINARY_API_SECRET,
    }
    missing = [k for k, v in creds.items() if not v]
    if missing:
        logger.warning("Cloudinary config missing vars: %s. Uploads will likely fail.", missing)

    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


class CloudinaryArtifactStore:
    """Stores rendered PDFs as Cloudinary `raw` resources.

    Both calls block on the Cloudinary SDK; async callers run them in a thread.
    No retries: a failure is reported once as StoreFailure.
    """

    resource_type = "raw"

    def __init__(self):
        self._configured = False

    def _ensure_configured(self):
        if not self._configured:
            configure_cloudinary()
            self._configured = True

    def store(self, data: bytes, folder: str, filename: str) -> StoredArtifact:
        try:
            self._ensure_configured()
            upload_result = cloudinary.uploader.upload(
                data,
                folder=folder,
                public_id=filename,
                resource_type=self.resource_type,
                overwrite=True,
            )
        except Exception as e:
            raise StoreFailure(f"Cloudinary upload failed: {e}") from e

        url = upload_result.get("secure_url")
        public_id = upload_result.get("public_id")
        if not url or not public_id:
            raise StoreFailure("Cloudinary upload returned no URL")

        logger.info("Uploaded %s to Cloudinary (%s bytes)", public_id, upload_result.get("bytes"))
        return StoredArtifact(
            url=url,
            storageId=public_id,
            byteSize=int(upload_result.get("bytes") or len(data)),
        )

    def delete(self, storage_id: str) -> bool:
        """Returns False when Cloudinary has no such resource."""
        try:
            self._ensure_configured()
            result = cloudinary.uploader.destroy(storage_id, resource_type=self.resource_type)
        except Exception as e:
            raise StoreFailure(f"Cloudinary delete failed: {e}") from e

        outcome = (result or {}).get("result")
        if outcome == "ok":
            logger.info("Deleted %s from Cloudinary", storage_id)
            return True
        if outcome == "not found":
            return False
        raise StoreFailure(f"Cloudinary delete returned {outcome!r}")
