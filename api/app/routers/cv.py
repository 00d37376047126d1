import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.dependencies import get_upload_relay
from app.schemas.cv import CVData
from app.services.cv_pdf_renderer import render_cv_pdf
from app.services.upload_relay import UploadRelay, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cv"])

ANALYZE_PATHS = ("/api/analyze-cv", "/upload")
GENERATE_PATH = "/api/generate-cv"
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"Upload too large. Max allowed is {settings.max_upload_mb}MB.",
    )


@router.post(ANALYZE_PATHS[0])
@router.post(ANALYZE_PATHS[1], include_in_schema=False)
async def analyze_cv(request: Request, relay: UploadRelay = Depends(get_upload_relay)):
    """Forward an uploaded CV PDF to the scoring service and relay its JSON verdict as-is."""
    max_bytes = settings.max_upload_mb * 1024 * 1024
    # Content-Length covers boundaries and part headers too; the exact cap is enforced on the decoded file.
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes + MULTIPART_OVERHEAD_BYTES:
        raise _too_large()

    try:
        form = await request.form()
    except StarletteHTTPException:
        raise
    except Exception as e:
        logger.info("Rejected upload: unparseable multipart body: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Could not parse multipart form: {e}") from e

    try:
        upload = form.get(relay.field_name)
        if not isinstance(upload, UploadFile):
            logger.info("Rejected upload: no %r file field", relay.field_name)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid file: missing '{relay.field_name}' file field",
            )
        content = await upload.read()
        if len(content) > max_bytes:
            raise _too_large()
        filename = upload.filename
        content_type = upload.content_type
    finally:
        await form.close()

    try:
        relayed = await relay.forward(filename, content, content_type)
    except UpstreamTimeout as e:
        logger.warning("Scoring service timed out at step=%s: %s", e.step, e)
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e)) from e
    except UpstreamError as e:
        logger.warning("Relay to scoring service failed at step=%s: %s", e.step, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e

    return Response(content=relayed.content, status_code=relayed.status_code, media_type="application/json")


@router.post(GENERATE_PATH)
def generate_cv(body: CVData):
    """Render the posted CV record to a downloadable PDF."""
    try:
        pdf = render_cv_pdf(body)
    except RuntimeError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate PDF") from e
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=cv.pdf"},
    )
