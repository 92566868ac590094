"""
Résumé file storage on local disk
"""
import os
import re
import uuid
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
import structlog

from app.core.config import Settings
from app.core.exceptions import ValidationError

logger = structlog.get_logger()

ALLOWED_RESUME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

RESUME_URL_PREFIX = "/uploads/resumes"


class ResumeStorage:
    """Writes uploads under ``<UPLOAD_DIR>/resumes`` and hands back their public URL"""

    def __init__(self, settings: Settings):
        self.root = Path(settings.UPLOAD_DIR)
        self.directory = self.root / "resumes"
        self.max_bytes = settings.MAX_RESUME_SIZE_MB * 1024 * 1024

    def ensure_directory(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    def validate(self, upload: UploadFile, require_type: bool = False) -> bytes:
        """
        Check content type and size, returning the file bytes.

        ``require_type`` rejects uploads that carry no content type at all;
        otherwise only a declared, unsupported type is refused.
        """
        content_type = upload.content_type or ""
        if content_type not in ALLOWED_RESUME_TYPES and (content_type or require_type):
            raise ValidationError("Invalid resume file type. Only PDF or Word files are allowed.")

        content = upload.file.read()
        if len(content) > self.max_bytes:
            size_mb = self.max_bytes // (1024 * 1024)
            raise ValidationError(f"Resume file is too large (max {size_mb}MB).")
        return content

    def save(self, upload: UploadFile, content: bytes, prefix: Optional[str] = None) -> str:
        original = upload.filename or "resume"
        if prefix:
            sanitized = re.sub(r"[^a-zA-Z0-9._-]", "", re.sub(r"\s+", "_", original))
            file_name = f"{prefix}-{uuid.uuid4().hex[:8]}-{sanitized}"
        else:
            ext = original.rsplit(".", 1)[-1] if "." in original else "pdf"
            file_name = f"{uuid.uuid4()}.{ext}"

        self.ensure_directory()
        with open(self.directory / file_name, "wb") as f:
            f.write(content)

        logger.info("resume_stored", file_name=file_name, size=len(content))
        return f"{RESUME_URL_PREFIX}/{file_name}"

    def delete(self, url: str) -> None:
        """Remove a file previously returned by ``save``"""
        if not url.startswith(f"{RESUME_URL_PREFIX}/"):
            return
        path = self.directory / url.rsplit("/", 1)[-1]
        path.unlink(missing_ok=True)
        logger.info("resume_discarded", file_name=path.name)
