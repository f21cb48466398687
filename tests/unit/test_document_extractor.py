"""Unit tests for the flow-document placeholder extractors."""

import asyncio
import io
import logging

import pytest

from docfill.interfaces.extractor import BasePlaceholderExtractor, ExtractionDegraded
from docfill.strategies.extractors import (
    ByteHeuristicExtractor,
    ChainedExtractor,
    DocxTagExtractor,
    try_in_order,
)
from docfill.strategies.extractors.document import reconstruct_text
from tests.conftest import build_docx


class _Failing(BasePlaceholderExtractor):
    async def extract(self, data: bytes) -> set[str]:
        raise ExtractionDegraded("cannot parse")

    @property
    def supported_extensions(self) -> set[str]:
        return {".docx"}


class _Fixed(BasePlaceholderExtractor):
    def __init__(self, names: set[str]) -> None:
        self.names = names
        self.calls = 0

    async def extract(self, data: bytes) -> set[str]:
        self.calls += 1
        return set(self.names)

    @property
    def supported_extensions(self) -> set[str]:
        return {".docx"}


# =============================================================================
# Tag Engine Extractor Tests
# =============================================================================


class TestDocxTagExtractor:
    """Test suite for DocxTagExtractor."""

    @pytest.fixture
    def extractor(self):
        return DocxTagExtractor()

    def test_declared_variables(self, extractor):
        data = build_docx("Dear {{ client_name }},", "Your total is {{ total }}.")
        assert asyncio.run(extractor.extract(data)) == {"client_name", "total"}

    def test_free_form_names(self, extractor):
        data = build_docx("Dear {{client name}}, ref {{order-id}}", "Due {{ due date }}")

        assert asyncio.run(extractor.extract(data)) == {"client name", "order-id", "due date"}

    def test_escaped_characters_in_names(self, extractor):
        data = build_docx("{{R&D budget}} and {{a<b}}")

        assert asyncio.run(extractor.extract(data)) == {"R&D budget", "a<b"}

    def test_tag_split_across_runs(self, extractor):
        from docx import Document

        document = Document()
        paragraph = document.add_paragraph("Dear ")
        paragraph.add_run("{{client ").bold = True
        paragraph.add_run("name}}")
        buffer = io.BytesIO()
        document.save(buffer)

        assert asyncio.run(extractor.extract(buffer.getvalue())) == {"client name"}

    def test_empty_tag_ignored(self, extractor):
        data = build_docx("Hello {{ }} and {{name}}")

        assert asyncio.run(extractor.extract(data)) == {"name"}

    def test_document_without_tags(self, extractor):
        assert asyncio.run(extractor.extract(build_docx("No tags here"))) == set()

    def test_unparseable_document_raises(self, extractor):
        with pytest.raises(ExtractionDegraded):
            asyncio.run(extractor.extract(b"PK\x03\x04 broken archive"))


# =============================================================================
# Byte Heuristic Tests
# =============================================================================


class TestByteHeuristicExtractor:
    """Test suite for ByteHeuristicExtractor."""

    def test_null_runs_become_single_space(self):
        assert reconstruct_text(b"a\x00b\x00\x00\x00\x00c") == "a b c"

    def test_control_bytes_dropped(self):
        assert reconstruct_text(b"a\x01\x02b\tc\nd\re\x7f") == "ab\tc\nd\re"

    def test_high_bytes_kept_as_code_points(self):
        assert reconstruct_text(b"caf\xe9") == "café"

    def test_only_double_brace_grammar(self):
        extractor = ByteHeuristicExtractor()
        data = b"\x00\x01{{invoice_no}}\x00<<ignored>> {also_ignored} $nope$\xff{{ date }}"
        assert asyncio.run(extractor.extract(data)) == {"invoice_no", "date"}


# =============================================================================
# Chained Extractor Tests
# =============================================================================


class TestChainedExtractor:
    """Test suite for ChainedExtractor and try_in_order."""

    def test_first_success_wins(self):
        primary = _Fixed({"a"})
        fallback = _Fixed({"b"})
        chain = try_in_order(primary, fallback)

        assert asyncio.run(chain.extract(b"")) == {"a"}
        assert fallback.calls == 0

    def test_falls_back_on_failure(self):
        fallback = _Fixed({"b"})
        chain = try_in_order(_Failing(), fallback)

        assert asyncio.run(chain.extract(b"")) == {"b"}
        assert fallback.calls == 1

    def test_all_failing_yields_empty_set(self, caplog):
        chain = try_in_order(_Failing(), _Failing(), log=logging.getLogger("test.chain"))

        with caplog.at_level(logging.WARNING, logger="test.chain"):
            assert asyncio.run(chain.extract(b"")) == set()

        assert any("all 2 strategies failed" in r.message for r in caplog.records)

    def test_requires_a_strategy(self):
        with pytest.raises(ValueError):
            ChainedExtractor([])

    def test_corrupted_docx_falls_back_to_bytes(self):
        """Test that bytes the tag engine rejects are still scanned."""
        chain = try_in_order(DocxTagExtractor(), ByteHeuristicExtractor())
        data = b"not a zip\x00\x00{{client_name}}\x00garbage{{amount}}"

        assert asyncio.run(chain.extract(data)) == {"client_name", "amount"}

    def test_valid_docx_uses_tag_engine(self):
        chain = try_in_order(DocxTagExtractor(), ByteHeuristicExtractor())
        data = build_docx("Hello {{ name }}")

        assert asyncio.run(chain.extract(data)) == {"name"}
