"""
vibe_affiliate.api.routers.uploads

Image upload validation endpoint.

Responsibilities:
- Check size, MIME type, extension and filename of an uploaded image.
- Record rejected uploads as security events.

Accepted content is not stored; the response only echoes the validated metadata.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY

from vibe_affiliate.api.deps import settings_dep
from vibe_affiliate.auth.deps import get_principal
from vibe_affiliate.auth.models import Principal
from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.errors import AppError, ErrorCode
from vibe_affiliate.security.audit import SecurityEvent, log_security_event
from vibe_affiliate.security.helpers import get_client_ip, validate_file_upload
from vibe_affiliate.settings import Settings

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])


class UploadAccepted(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    content_type: str
    size: int


@router.post("")
async def upload(
    request: Request,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(settings_dep),
) -> APIResponse[UploadAccepted]:
    # One byte past the limit is enough to know it is too large.
    content = await file.read(settings.upload_max_bytes + 1)
    filename = file.filename or ""
    content_type = file.content_type or ""

    result = validate_file_upload(
        filename, content_type, len(content), max_size=settings.upload_max_bytes
    )
    if not result.valid:
        log_security_event(
            SecurityEvent(
                event="upload_rejected",
                level="medium",
                ip=get_client_ip(request.headers, request.client.host if request.client else None),
                user_id=principal.subject,
                user_agent=request.headers.get("user-agent"),
                details={"filename": filename, "reason": result.error},
            ),
            env=settings.env,
        )
        raise AppError(
            ErrorCode.invalid_file,
            result.error or "Invalid file",
            status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        )

    return APIResponse.ok(
        UploadAccepted(filename=filename, content_type=content_type, size=len(content)),
        message="File accepted",
    )
