"""Template API routes.

Handles placeholder extraction, template upload, document generation and
template deletion.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from docfill.api.conversion import attachment_header
from docfill.api.deps import get_component_factory, get_template_service, get_user_id
from docfill.api.errors import ApiError
from docfill.api.schemas import (
    GenerateRequest,
    PlaceholderExtractionResponse,
    TemplateResponse,
)
from docfill.core.factory import ComponentFactory
from docfill.interfaces.converter import ConversionFailed, ConversionUnavailable
from docfill.interfaces.rewriter import DocumentProcessingError
from docfill.interfaces.template import GenerationRequest, TemplateKind
from docfill.interfaces.values import ImageDecodeError
from docfill.services.templates import (
    TemplateNotFoundError,
    TemplateService,
    UnsupportedTemplateError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["templates"])


async def _read_upload(file: UploadFile | None) -> tuple[str, bytes]:
    if file is None or not file.filename:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "No file provided")
    return file.filename, await file.read()


@router.post("/placeholders/extract", response_model=PlaceholderExtractionResponse)
async def extract_placeholders(
    file: UploadFile | None = File(default=None),
    factory: ComponentFactory = Depends(get_component_factory),
) -> PlaceholderExtractionResponse:
    """Find the placeholders in a template without storing it.

    Extraction problems never fail the request; they yield fewer (or no)
    placeholders.

    Raises:
        ApiError: 400 without a file, 415 for unsupported file types.
    """
    filename, data = await _read_upload(file)

    kind = TemplateKind.detect(filename, file.content_type)
    if kind is None:
        raise ApiError(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "Only .docx and .xlsx files are supported",
        )

    placeholders = sorted(await factory.get_extractor(kind).extract(data))
    logger.info(f"Extracted {len(placeholders)} placeholders from {filename}")
    return PlaceholderExtractionResponse(filename=filename, kind=kind, placeholders=placeholders)


@router.post(
    "/templates",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_template(
    file: UploadFile | None = File(default=None),
    user_id: uuid.UUID = Depends(get_user_id),
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    """Upload a template and record the placeholders found in it.

    Raises:
        ApiError: 400 without a file, 415 for unsupported file types,
            500 when the template cannot be stored.
    """
    try:
        filename, data = await _read_upload(file)
        logger.info(f"Uploading template for user {user_id}: {filename}")

        template = await service.upload_template(user_id, filename, data, file.content_type)
        return TemplateResponse.from_document(template)

    except ApiError:
        raise
    except UnsupportedTemplateError as e:
        raise ApiError(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(e)) from e
    except Exception as e:
        logger.error(f"Template upload failed: {e}", exc_info=True)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Template upload failed", str(e)
        ) from e


@router.post("/templates/{template_id}/generate")
async def generate_document(
    template_id: uuid.UUID,
    request: GenerateRequest,
    user_id: uuid.UUID = Depends(get_user_id),
    service: TemplateService = Depends(get_template_service),
) -> Response:
    """Generate a document from a stored template.

    Returns:
        The generated document as an attachment.

    Raises:
        ApiError: 404 unknown template, 400 format not valid for the
            template, 422 bad image data or unprocessable template, 503
            LibreOffice unavailable, 500 conversion or other failure.
    """
    try:
        artifact = await service.generate(
            user_id,
            GenerationRequest(
                template_id=template_id,
                values=request.values,
                target_format=request.format,
            ),
        )
        return Response(
            content=artifact.content,
            media_type=artifact.media_type,
            headers=attachment_header(artifact.name),
        )

    except TemplateNotFoundError as e:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Template not found", str(e)) from e
    except ImageDecodeError as e:
        raise ApiError(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Image processing failed", str(e)
        ) from e
    except DocumentProcessingError as e:
        logger.error(f"Document processing failed ({e.category}): {e}")
        raise ApiError(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Document processing failed", str(e)
        ) from e
    except ConversionUnavailable as e:
        raise ApiError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "PDF conversion service is not available",
            str(e),
        ) from e
    except ConversionFailed as e:
        logger.error(f"PDF conversion failed: {e}; stderr: {e.stderr}")
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "PDF conversion failed", str(e)
        ) from e
    except FileNotFoundError as e:
        logger.error(f"Stored template file missing for {template_id}: {e}")
        raise ApiError(status.HTTP_404_NOT_FOUND, "Template file not found", str(e)) from e
    except ValueError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid generation request", str(e)) from e
    except Exception as e:
        logger.error(f"Document generation failed: {e}", exc_info=True)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Document generation failed", str(e)
        ) from e


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_user_id),
    service: TemplateService = Depends(get_template_service),
) -> Response:
    """Delete a template, its generated artifact records and its stored file."""
    try:
        await service.delete_template(user_id, template_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except TemplateNotFoundError as e:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Template not found", str(e)) from e
    except Exception as e:
        logger.error(f"Template deletion failed: {e}", exc_info=True)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Template deletion failed", str(e)
        ) from e
