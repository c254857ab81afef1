"""
assets.py — Uploaded Asset Storage (company logos, filing documents)

Purpose:
- Wrap the Supabase storage bucket behind a small port so the translator can
  upload a file and derive its public URL without knowing the client.
- Own the object path conventions:
    * logo:            company-logos/{company_id}-{filename}   (overwrites)
    * filing document: regulatory_filings/{company_id}/{filename}  (no overwrite)
"""

from __future__ import annotations

from typing import Optional, Protocol

from supabase import Client, create_client

from app.core.config import settings
from app.core.exceptions import AssetUploadError
from app.core.logging import get_logger

logger = get_logger(__name__)


def logo_path(company_id: str, filename: str) -> str:
    return f"company-logos/{company_id}-{filename}"


def filing_document_path(company_id: str, filename: str) -> str:
    return f"regulatory_filings/{company_id}/{filename}"


def manual_public_url(bucket: str, path: str) -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/storage/v1/object/public/{bucket}/{path}"


class AssetStorage(Protocol):
    def upload(self, path: str, content: bytes, content_type: Optional[str] = None, upsert: bool = False) -> str:
        """Store content at path; returns the stored object path."""
        ...

    def public_url(self, path: str) -> str:
        ...


class SupabaseAssetStorage:
    """
    Asset storage over one Supabase storage bucket.
    """

    def __init__(self, client: Optional[Client] = None, bucket: Optional[str] = None):
        self._client = client or create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        self.bucket = bucket or settings.STORAGE_BUCKET

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None, upsert: bool = False) -> str:
        options = {"upsert": "true" if upsert else "false"}
        if content_type:
            options["content-type"] = content_type
        try:
            response = self._client.storage.from_(self.bucket).upload(path=path, file=content, file_options=options)
        except Exception as e:
            raise AssetUploadError(f"Failed to upload {path} to bucket {self.bucket}: {e}") from e

        stored_path = getattr(response, "path", None) or path
        logger.info(f"Uploaded {stored_path} to bucket {self.bucket}")
        return stored_path

    def public_url(self, path: str) -> str:
        try:
            url = self._client.storage.from_(self.bucket).get_public_url(path)
        except Exception as e:
            logger.warning(f"Storage public URL lookup failed for {path}, building it manually: {e}")
            url = None
        if isinstance(url, str) and url and url not in ("null", "undefined"):
            return url
        return manual_public_url(self.bucket, path)
