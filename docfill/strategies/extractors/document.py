"""Flow-document (Word) placeholder extractors.

The primary strategy asks the tag engine (docxtpl) which variables the
template declares. When the document cannot be parsed, a byte-level
heuristic reconstructs approximate text and looks for ``{{name}}`` tokens.
The two are composed with :func:`try_in_order`.
"""

import asyncio
import io
import logging
import re

from docfill.interfaces.extractor import BasePlaceholderExtractor, ExtractionDegraded
from docfill.strategies.placeholders.scanner import scan_double_brace

logger = logging.getLogger(__name__)

_NULL_RUN = re.compile(rb"\x00+")
# Control bytes other than tab, line feed and carriage return are dropped.
_DROPPED_CONTROL_BYTES = bytes(b for b in range(32) if b not in (9, 10, 13)) + b"\x7f"


class DocxTagExtractor(BasePlaceholderExtractor):
    """Extracts the variable names declared in a docxtpl template.

    Raises ExtractionDegraded when the document cannot be parsed, so it is
    meant to be composed with a fallback.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def extract(self, data: bytes) -> set[str]:
        """Extract declared tag names.

        Args:
            data: The .docx content.

        Returns:
            The set of trimmed, non-empty tag names.

        Raises:
            ExtractionDegraded: If the tag engine cannot parse the document.
        """
        return await asyncio.to_thread(self.extract_sync, data)

    def extract_sync(self, data: bytes) -> set[str]:
        from docfill.strategies.placeholders.docx_tags import PlaceholderDocxTemplate

        try:
            declared = PlaceholderDocxTemplate(io.BytesIO(data)).placeholder_names()
        except Exception as e:
            raise ExtractionDegraded(f"Tag engine could not parse document: {e}") from e

        placeholders = {name.strip() for name in declared if isinstance(name, str)}
        placeholders.discard("")
        self._log.info(f"Tag engine found {len(placeholders)} placeholders")
        return placeholders

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}


class ByteHeuristicExtractor(BasePlaceholderExtractor):
    """Finds ``{{name}}`` tokens in text reconstructed from raw bytes.

    The reconstruction is lossy: each run of null bytes becomes one space,
    printable ASCII and tab/newline/carriage return pass through, bytes above
    127 become the code point of the same value, other control bytes are
    dropped. Only the double-brace grammar is applied; the others match too
    much binary noise.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def extract(self, data: bytes) -> set[str]:
        """Extract double-brace placeholders from raw bytes."""
        return await asyncio.to_thread(self.extract_sync, data)

    def extract_sync(self, data: bytes) -> set[str]:
        text = reconstruct_text(data)
        self._log.debug(f"Reconstructed {len(text)} characters from {len(data)} bytes")
        placeholders = scan_double_brace(text)
        self._log.info(f"Byte heuristic found {len(placeholders)} placeholders")
        return placeholders

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}


def reconstruct_text(data: bytes) -> str:
    """Approximate the text content of a binary blob."""
    collapsed = _NULL_RUN.sub(b" ", data)
    return collapsed.translate(None, _DROPPED_CONTROL_BYTES).decode("latin-1")


class ChainedExtractor(BasePlaceholderExtractor):
    """Tries extraction strategies in order until one succeeds.

    A strategy that raises is logged and the next one is tried. If every
    strategy fails the result is an empty set; this extractor never raises.
    """

    def __init__(
        self,
        strategies: list[BasePlaceholderExtractor],
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the chain.

        Args:
            strategies: Extractors in order of preference.
            log: Logger for diagnostics. Defaults to the module logger.
        """
        if not strategies:
            raise ValueError("ChainedExtractor needs at least one strategy")
        self._strategies = list(strategies)
        self._log = log or logger

    @property
    def strategies(self) -> list[BasePlaceholderExtractor]:
        return list(self._strategies)

    async def extract(self, data: bytes) -> set[str]:
        """Return the result of the first strategy that does not raise."""
        for strategy in self._strategies:
            name = type(strategy).__name__
            try:
                return await strategy.extract(data)
            except Exception as e:
                self._log.warning(f"{name} failed, trying next strategy: {e}")

        self._log.warning(
            f"{ExtractionDegraded.__name__}: all {len(self._strategies)} strategies "
            "failed, continuing with no placeholders"
        )
        return set()

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        extensions: set[str] = set()
        for strategy in self._strategies:
            extensions |= strategy.supported_extensions
        return extensions


def try_in_order(
    *strategies: BasePlaceholderExtractor,
    log: logging.Logger | None = None,
) -> ChainedExtractor:
    """Compose extraction strategies into a fail-open chain."""
    return ChainedExtractor(list(strategies), log=log)
