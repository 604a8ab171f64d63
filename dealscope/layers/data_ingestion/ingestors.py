"""
Source Ingestors - CRM exports and meeting transcripts

Each ingestor turns raw user input into the shape the rest of the system
consumes:
- CrmExportIngestor: CSV text -> list of string rows
- TranscriptIngestor: transcript files -> one combined transcript text

Key design principles:
- Values stay strings; nothing is typed or inferred at ingestion
- Unsupported or unreadable input fails before any model call
"""

import io
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from ...core.log import get_logger
from ...errors import InputParseError, UnsupportedInputFormat

logger = get_logger(__name__)

TRANSCRIPT_DELIMITER = "\n\n--- NEW TRANSCRIPT ---\n\n"

CSV_MIME_TYPES = {"text/csv", "application/vnd.ms-excel"}
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class SourceIngestor(ABC):
    """Base class for user-input ingestors."""

    @abstractmethod
    def validate(self, source: Any) -> tuple[bool, list[str]]:
        """Validate input before ingestion. Returns (is_valid, errors)."""
        pass

    @abstractmethod
    def ingest(self, source: Any) -> Any:
        """Transform raw input into its ingested form."""
        pass


class CrmExportIngestor(SourceIngestor):
    """
    Ingestor for CRM data exports (CSV).

    Every cell is read as a string. Empty cells become "" rather than NaN,
    and blank lines are skipped.
    """

    def validate(self, file_name: str) -> tuple[bool, list[str]]:
        mime, _ = mimetypes.guess_type(file_name)
        if file_name.lower().endswith(".csv") or mime in CSV_MIME_TYPES:
            return True, []
        return False, [f"Please upload a valid .csv file, got {file_name!r}"]

    def ingest(self, csv_text: str) -> list[dict[str, str]]:
        try:
            frame = pd.read_csv(
                io.StringIO(csv_text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise InputParseError(f"Failed to parse CSV file: {e}") from e

        rows = frame.to_dict(orient="records")
        logger.info("csv_parsed", rows=len(rows), columns=len(frame.columns))
        return rows

    def ingest_file(self, path: Path) -> list[dict[str, str]]:
        is_valid, errors = self.validate(path.name)
        if not is_valid:
            raise UnsupportedInputFormat("; ".join(errors))
        return self.ingest(path.read_text(encoding="utf-8-sig"))


class TranscriptIngestor(SourceIngestor):
    """
    Ingestor for meeting transcripts.

    Handles:
    - Plain text (.txt)
    - PDF (.pdf), text layer only
    - Word documents (.docx)

    Several transcripts are combined into one text, separated by the
    multi-transcript delimiter the analysis prompt explains to the model.
    """

    SUPPORTED_SUFFIXES = {".txt", ".pdf", ".docx"}

    def validate(self, path: Path) -> tuple[bool, list[str]]:
        if self._kind(path) is None:
            return False, [
                f"Unsupported file type: {path.name}. Please upload .txt, .pdf, or .docx files."
            ]
        return True, []

    def _kind(self, path: Path):
        suffix = path.suffix.lower()
        mime, _ = mimetypes.guess_type(path.name)
        if suffix == ".pdf" or mime == "application/pdf":
            return "pdf"
        if suffix == ".docx" or mime == DOCX_MIME_TYPE:
            return "docx"
        if suffix == ".txt" or mime == "text/plain":
            return "txt"
        return None

    def extract_text(self, path: Path) -> str:
        """Extract the text of a single transcript file."""
        kind = self._kind(path)
        if kind is None:
            raise UnsupportedInputFormat(self.validate(path)[1][0])

        if kind == "pdf":
            return self._extract_pdf_text(path)
        if kind == "docx":
            return self._extract_docx_text(path)
        return path.read_text(encoding="utf-8", errors="replace")

    def _extract_pdf_text(self, path: Path) -> str:
        from pypdf import PdfReader

        reader = PdfReader(str(path))
        return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _extract_docx_text(self, path: Path) -> str:
        from docx import Document

        document = Document(str(path))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    def ingest(self, paths: Iterable[Path]) -> str:
        """Extract every file and combine the non-blank texts."""
        return combine_transcripts(self.extract_text(Path(p)) for p in paths)


def combine_transcripts(texts: Iterable[str]) -> str:
    """Join transcripts with the multi-transcript delimiter, dropping blank ones."""
    return TRANSCRIPT_DELIMITER.join(text for text in texts if text.strip())
