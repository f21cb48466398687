"""PDF conversion API routes.

Converts uploaded office documents with the configured LibreOffice
converter and reports whether the converter is usable.
"""

import logging
from datetime import datetime, timezone
from pathlib import PurePath
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from docfill.api.deps import get_component_factory
from docfill.api.errors import ApiError
from docfill.api.schemas import PdfServiceHealthResponse
from docfill.core.factory import ComponentFactory
from docfill.interfaces.converter import ConversionFailed, ConversionUnavailable
from docfill.interfaces.template import PDF_MEDIA_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["conversion"])


def attachment_header(file_name: str) -> dict[str, str]:
    """Content-Disposition header for a download.

    Header values must be latin-1, so names outside printable ASCII get an
    underscore fallback in ``filename`` plus the RFC 5987 ``filename*``
    form carrying the UTF-8 name.

    Args:
        file_name: The download name.

    Returns:
        The header mapping to pass to a Response.
    """
    name = "".join(ch for ch in file_name if ch not in '"\r\n\\')
    fallback = "".join(ch if " " <= ch <= "~" else "_" for ch in name)
    disposition = f'attachment; filename="{fallback}"'
    if fallback != name:
        disposition += f"; filename*=UTF-8''{quote(name)}"
    return {"Content-Disposition": disposition}


@router.post("/convert-to-pdf")
async def convert_to_pdf(
    file: UploadFile | None = File(default=None),
    factory: ComponentFactory = Depends(get_component_factory),
) -> Response:
    """Convert an uploaded document to PDF.

    Args:
        file: The document to convert (multipart field ``file``).
        factory: Component factory providing the converter.

    Returns:
        The PDF as an attachment named after the upload.

    Raises:
        ApiError: 400 without a file, 503 when LibreOffice is unavailable,
            500 when the conversion fails.
    """
    try:
        if file is None or not file.filename:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "No file provided")

        logger.info(f"Converting file to PDF: {file.filename}")

        converter = factory.get_pdf_converter()
        if not await converter.is_available():
            raise ApiError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "LibreOffice is not available for PDF conversion",
            )

        data = await file.read()
        pdf = await converter.convert(data, file.filename)

        logger.info(f"PDF conversion successful, size: {len(pdf)} bytes")

        return Response(
            content=pdf,
            media_type=PDF_MEDIA_TYPE,
            headers=attachment_header(f"{PurePath(file.filename).stem}.pdf"),
        )

    except ApiError:
        raise
    except ConversionUnavailable as e:
        logger.warning(f"PDF conversion unavailable: {e}")
        raise ApiError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "LibreOffice is not available for PDF conversion",
            str(e),
        ) from e
    except ConversionFailed as e:
        logger.error(f"PDF conversion failed: {e}; stderr: {e.stderr}")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "PDF conversion failed", str(e)
        ) from e
    except Exception as e:
        logger.error(f"PDF conversion failed: {e}", exc_info=True)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "PDF conversion failed",
            str(e) or "Unknown error",
        ) from e


@router.get("/pdf-service-health", response_model=PdfServiceHealthResponse)
async def pdf_service_health(
    factory: ComponentFactory = Depends(get_component_factory),
) -> PdfServiceHealthResponse:
    """Report whether LibreOffice is available for conversions."""
    available = await factory.get_pdf_converter().is_available()
    return PdfServiceHealthResponse(
        status="healthy" if available else "unavailable",
        libreoffice=available,
        timestamp=datetime.now(timezone.utc),
    )
