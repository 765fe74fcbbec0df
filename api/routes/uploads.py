"""Resume upload endpoint."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from api.dependencies import require_principal
from core.config import settings
from core.exceptions import ValidationError
from core.security import Principal
from core.storage.s3 import ResumeStorage
from core.utils.validators import validate_resume_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["uploads"])


class ResumeUploadResponse(BaseModel):
    secure_url: str
    public_id: str
    message: str = "File uploaded successfully"


async def read_resume(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read a validated resume without buffering more than ``max_bytes + 1``.

    Raises:
        ValidationError: Wrong type, empty, or larger than ``max_bytes``
    """
    if file.size is not None and file.size > max_bytes:
        data, size = b"", file.size
    else:
        data = await file.read(max_bytes + 1)
        size = len(data)

    ok, error = validate_resume_file(file.content_type, size, max_bytes)
    if not ok:
        raise ValidationError(error, fields=["file"])
    return data


@router.post(
    "/resume",
    response_model=ResumeUploadResponse,
    summary="Upload Resume",
    description="Store a PDF, DOC or DOCX resume (max 5MB) and return its URL.",
)
async def upload_resume(
    file: UploadFile = File(...),
    principal: Principal = Depends(require_principal),
) -> ResumeUploadResponse:
    data = await read_resume(file, settings.resume_max_bytes)

    storage = ResumeStorage()
    result = await storage.upload(
        data,
        file.filename or "resume",
        file.content_type,
        metadata={"uploaded-by": principal.email},
    )

    logger.info(f"Resume uploaded ({len(data)} bytes, {file.content_type})")
    return ResumeUploadResponse(**result)
