"""LibreOffice PDF converter.

Each conversion runs a headless LibreOffice process inside its own pair of
randomly named temp directories, which are removed on every exit path.
"""

import asyncio
import logging
import os
import shutil
import sys
import tempfile
import uuid
from pathlib import Path, PurePath

from docfill.interfaces.converter import (
    BasePdfConverter,
    ConversionFailed,
    ConversionUnavailable,
)

logger = logging.getLogger(__name__)

WINDOWS_INSTALL_PATHS = (
    r"C:\Program Files\LibreOffice\program\soffice.exe",
    r"C:\Program Files (x86)\LibreOffice\program\soffice.exe",
)

CONVERSION_ARGS = (
    "--headless",
    "--invisible",
    "--nodefault",
    "--nolockcheck",
    "--nologo",
    "--norestore",
    "--convert-to",
    "pdf",
)


def pdf_file_name(original_file_name: str) -> str:
    """Name LibreOffice gives the PDF converted from ``original_file_name``."""
    return f"{PurePath(original_file_name).stem}.pdf"


def safe_input_name(original_file_name: str) -> str:
    """Strip any directory part so the input stays inside its temp dir."""
    name = PurePath(original_file_name.replace("\\", "/")).name
    if not name or name in {".", ".."}:
        return "document.docx"
    return name


class LibreOfficeConverter(BasePdfConverter):
    """Converts office documents to PDF with a headless LibreOffice.

    Example:
        ```python
        converter = LibreOfficeConverter(timeout=30)
        if await converter.is_available():
            pdf = await converter.convert(docx_bytes, "report.docx")
        ```
    """

    def __init__(
        self,
        command: str | None = None,
        timeout: float = 30.0,
        availability_timeout: float = 10.0,
        temp_dir: Path | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            command: LibreOffice binary. Auto-detected when None.
            timeout: Seconds before a conversion process is killed.
            availability_timeout: Seconds allowed for the version check.
            temp_dir: Parent of the per-request directories. Defaults to
                ``<system temp>/pdf-conversion``.
            log: Logger for diagnostics. Defaults to the module logger.
        """
        self._command = command
        self._timeout = timeout
        self._availability_timeout = availability_timeout
        self._temp_root = Path(temp_dir or Path(tempfile.gettempdir()) / "pdf-conversion")
        self._log = log or logger

    @property
    def timeout(self) -> float:
        return self._timeout

    def resolve_command(self) -> str:
        """Locate the LibreOffice binary.

        Returns:
            The command to execute.

        Raises:
            ConversionUnavailable: If no binary can be found.
        """
        if self._command:
            resolved = shutil.which(self._command) or self._command
            if os.path.isfile(resolved) and os.access(resolved, os.X_OK):
                return resolved
            raise ConversionUnavailable(f"LibreOffice not found at {self._command}")

        for candidate in ("libreoffice", "soffice"):
            resolved = shutil.which(candidate)
            if resolved:
                return resolved

        if sys.platform == "win32":
            for candidate in WINDOWS_INSTALL_PATHS:
                if os.path.isfile(candidate):
                    return candidate

        raise ConversionUnavailable("LibreOffice not found in PATH or common installation paths")

    async def is_available(self) -> bool:
        """Check that LibreOffice can be started with ``--version``."""
        try:
            command = self.resolve_command()
        except ConversionUnavailable as e:
            self._log.warning(str(e))
            return False

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                "--version",
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self._log.warning(f"LibreOffice could not be started: {e}")
            return False

        try:
            stdout, _ = await asyncio.wait_for(
                process.communicate(), timeout=self._availability_timeout
            )
        except asyncio.TimeoutError:
            self._log.warning("LibreOffice version check timed out")
            await self._kill(process)
            return False

        available = process.returncode == 0
        if available:
            self._log.debug(f"LibreOffice available: {stdout.decode('utf-8', 'ignore').strip()}")
        return available

    async def convert(self, data: bytes, original_file_name: str) -> bytes:
        """Convert a document to PDF.

        Args:
            data: The document bytes.
            original_file_name: Name of the document; its stem names the PDF.

        Returns:
            The PDF bytes.

        Raises:
            ConversionUnavailable: If LibreOffice cannot be located or started.
            ConversionFailed: On non-zero exit, timeout, or missing output.
        """
        session_id = uuid.uuid4().hex
        input_dir = self._temp_root / session_id
        output_dir = self._temp_root / f"{session_id}_output"

        try:
            input_dir.mkdir(parents=True, exist_ok=True)
            output_dir.mkdir(parents=True, exist_ok=True)

            input_path = input_dir / safe_input_name(original_file_name)
            input_path.write_bytes(data)

            await self._run_conversion(input_path, output_dir, input_dir / "profile")

            pdf_path = output_dir / pdf_file_name(input_path.name)
            if not pdf_path.is_file():
                raise ConversionFailed(
                    f"PDF conversion failed: {pdf_path.name} not found in output directory"
                )

            pdf = pdf_path.read_bytes()
            if not pdf:
                raise ConversionFailed("PDF conversion resulted in an empty file")

            self._log.info(f"PDF conversion successful: {original_file_name} ({len(pdf)} bytes)")
            return pdf

        except OSError as e:
            raise ConversionFailed(f"PDF conversion failed: {e}") from e
        finally:
            self._cleanup(input_dir, output_dir)

    async def _run_conversion(self, input_path: Path, output_dir: Path, profile_dir: Path) -> None:
        command = self.resolve_command()
        # A private user profile lets concurrent conversions run side by side.
        args = [
            f"-env:UserInstallation={profile_dir.resolve().as_uri()}",
            *CONVERSION_ARGS,
            "--outdir",
            str(output_dir),
            str(input_path),
        ]
        self._log.info(f"Running LibreOffice conversion: {command} {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ConversionUnavailable(f"LibreOffice could not be started: {e}") from e

        try:
            raw_stdout, raw_stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            await self._kill(process)
            raise ConversionFailed(
                f"LibreOffice conversion timed out after {self._timeout:g}s"
            ) from e
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        stdout = raw_stdout.decode("utf-8", "ignore")
        stderr = raw_stderr.decode("utf-8", "ignore")
        self._log.info(f"LibreOffice process exited with code {process.returncode}")
        if stderr:
            self._log.debug(f"stderr: {stderr}")
        if stdout:
            self._log.debug(f"stdout: {stdout}")

        if process.returncode != 0:
            raise ConversionFailed(
                f"LibreOffice conversion failed with code {process.returncode}",
                stdout=stdout,
                stderr=stderr,
            )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()

    def _cleanup(self, *directories: Path) -> None:
        for directory in directories:
            try:
                shutil.rmtree(directory, ignore_errors=False)
            except FileNotFoundError:
                continue
            except OSError as e:
                self._log.warning(f"Failed to cleanup {directory}: {e}")
