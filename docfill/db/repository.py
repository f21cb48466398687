"""SQL persistence of template and artifact records."""

import logging
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docfill.db.models import GeneratedArtifactRecord, TemplateRecord
from docfill.interfaces.repository import BaseTemplateRepository
from docfill.interfaces.template import GeneratedArtifact, TemplateDocument, TemplateKind

logger = logging.getLogger(__name__)


def to_document(record: TemplateRecord) -> TemplateDocument:
    """Convert a template row into its domain type."""
    return TemplateDocument(
        id=record.id,
        owner_id=record.owner_id,
        kind=TemplateKind(record.kind),
        name=record.name,
        file_path=record.file_path,
        size_bytes=record.file_size,
        placeholders=tuple(record.placeholders or ()),
        use_count=record.use_count,
        upload_date=record.upload_date,
    )


class SqlTemplateRepository(BaseTemplateRepository):
    """Template repository over an async SQLAlchemy session.

    Every write commits immediately; the caller owns the session.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_template(self, template: TemplateDocument) -> TemplateDocument:
        record = TemplateRecord(
            id=template.id,
            owner_id=template.owner_id,
            name=template.name,
            kind=template.kind.value,
            file_path=template.file_path,
            file_size=template.size_bytes,
            placeholders=list(template.placeholders),
            use_count=template.use_count,
        )
        if template.upload_date is not None:
            record.upload_date = template.upload_date

        self._session.add(record)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        await self._session.refresh(record)

        logger.info(f"Inserted template record {record.id} ({record.name})")
        return to_document(record)

    async def get_template(
        self, template_id: uuid.UUID, owner_id: uuid.UUID
    ) -> TemplateDocument | None:
        query = select(TemplateRecord).where(
            TemplateRecord.id == template_id,
            TemplateRecord.owner_id == owner_id,
        ).execution_options(populate_existing=True)
        result = await self._session.execute(query)
        record = result.scalar_one_or_none()
        return to_document(record) if record else None

    async def increment_use_count(self, template_id: uuid.UUID) -> int:
        statement = (
            update(TemplateRecord)
            .where(TemplateRecord.id == template_id)
            .values(use_count=TemplateRecord.use_count + 1)
        )
        try:
            await self._session.execute(statement)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        result = await self._session.execute(
            select(TemplateRecord.use_count).where(TemplateRecord.id == template_id)
        )
        return result.scalar_one()

    async def insert_artifact(
        self, artifact: GeneratedArtifact, owner_id: uuid.UUID
    ) -> None:
        record = GeneratedArtifactRecord(
            id=artifact.id,
            owner_id=owner_id,
            template_id=artifact.template_id,
            name=artifact.name,
            format=artifact.format.value,
            file_path=artifact.file_path,
            file_size=artifact.size_bytes,
            placeholder_data=dict(artifact.placeholder_data),
        )
        self._session.add(record)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        logger.info(f"Inserted artifact record {record.id} for template {artifact.template_id}")

    async def delete_template(
        self, template_id: uuid.UUID, owner_id: uuid.UUID
    ) -> list[str] | None:
        if await self.get_template(template_id, owner_id) is None:
            return None

        result = await self._session.execute(
            select(GeneratedArtifactRecord.file_path).where(
                GeneratedArtifactRecord.template_id == template_id
            )
        )
        artifact_paths = list(result.scalars().all())

        try:
            await self._session.execute(
                delete(GeneratedArtifactRecord).where(
                    GeneratedArtifactRecord.template_id == template_id
                )
            )
            await self._session.execute(
                delete(TemplateRecord).where(
                    TemplateRecord.id == template_id,
                    TemplateRecord.owner_id == owner_id,
                )
            )
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

        logger.info(
            f"Deleted template {template_id} and {len(artifact_paths)} artifact records"
        )
        return artifact_paths

    async def count_artifacts(self, template_id: uuid.UUID) -> int:
        """Number of artifact records generated from a template."""
        result = await self._session.execute(
            select(GeneratedArtifactRecord.id).where(
                GeneratedArtifactRecord.template_id == template_id
            )
        )
        return len(result.scalars().all())
