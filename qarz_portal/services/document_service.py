import logging
import re
import time
import uuid
from pathlib import Path
from typing import Dict, Iterable, Optional

from fastapi import UploadFile, HTTPException

from qarz_portal.core.config import settings
from qarz_portal.schemas.loan_schema import DocumentUpdate

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"image/jpeg", "image/png", "image/jpg", "image/webp"}
PUBLIC_PREFIX = "/uploads"

# Multipart field name -> DocumentUpdate slot
UPLOAD_FIELDS = {
    "profilePhoto": "profile_photo",
    "cnicFront": "cnic_front",
    "cnicBack": "cnic_back",
}


class DocumentService:
    def __init__(self, upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_size = max_size or settings.MAX_UPLOAD_SIZE

    # Builds the on-disk name: <epoch ms>-<short uuid>-<original name, whitespace replaced>
    @staticmethod
    def _generate_filename(original_filename: str) -> str:
        safe_name = re.sub(r"\s+", "-", Path(original_filename or "upload").name)
        return f"{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:8]}-{safe_name}"

    async def _read_validated(self, field: str, file: UploadFile) -> bytes:
        if not file or not file.filename:
            raise HTTPException(status_code=400, detail=f"Invalid file for {field}")

        content_type = (file.content_type or "").lower()
        if content_type not in ALLOWED_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"File type {content_type or 'unknown'} not allowed for {field}. "
                       f"Allowed types: {', '.join(sorted(ALLOWED_TYPES))}"
            )

        await file.seek(0)
        contents = await file.read()
        if not contents:
            raise HTTPException(status_code=400, detail=f"Empty file uploaded for {field}")
        if len(contents) > self.max_size:
            raise HTTPException(
                status_code=400,
                detail=f"File size {len(contents)} exceeds limit of {self.max_size} bytes"
            )
        return contents

    # Validates every file first, then writes them and returns the stored references
    async def store_files(self, files: Dict[str, UploadFile]) -> DocumentUpdate:
        files = {field: f for field, f in files.items() if f is not None}
        if not files:
            raise HTTPException(status_code=400, detail="No files uploaded")

        unknown = set(files) - set(UPLOAD_FIELDS)
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unexpected upload fields: {', '.join(sorted(unknown))}")

        contents = {field: await self._read_validated(field, f) for field, f in files.items()}

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored = {}
        for field, data in contents.items():
            filename = self._generate_filename(files[field].filename)
            target = self.upload_dir / filename
            try:
                target.write_bytes(data)
            except OSError as e:
                logger.error("Failed to write %s to %s: %s", field, target, e)
                self.discard(stored.values())
                raise HTTPException(status_code=500, detail=f"Failed to store {field}")
            stored[UPLOAD_FIELDS[field]] = f"{PUBLIC_PREFIX}/{filename}"
            logger.info("Stored %s (%d bytes) as %s", field, len(data), filename)

        return DocumentUpdate(**stored)

    # Removes files written for references that will not be persisted
    def discard(self, references: Iterable[str]) -> None:
        for reference in references:
            target = self.upload_dir / Path(reference).name
            try:
                target.unlink(missing_ok=True)
                logger.info("Discarded unreferenced upload %s", target.name)
            except OSError as e:
                logger.error("Failed to remove %s: %s", target, e)


document_service = DocumentService()
