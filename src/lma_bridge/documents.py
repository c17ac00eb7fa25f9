"""
Document loading for loan agreement analysis.

Turns uploaded files into plain text for the extraction engine. Supports
plain text, PDF (via PyPDF2) and Word .docx (via python-docx) files.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import docx
import structlog
from PyPDF2 import PdfReader

from .exceptions import ExtractionError

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = (".txt", ".pdf", ".docx")
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v]+")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass
class ProcessedDocument:
    """Text extracted from a document plus file metadata."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def word_count(self) -> int:
        return self.metadata.get("word_count", count_words(self.text))


def clean_extracted_text(text: str) -> str:
    """Normalize line breaks and whitespace, and drop control characters."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def validate_file(file_path: Union[str, Path]) -> Path:
    """
    Check that a file exists, is a supported type and is not too large.

    Raises:
        ExtractionError: If the file cannot be processed
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise ExtractionError(
            f"Document not found: {file_path}",
            source=str(file_path),
            recoverable=False,
        )

    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ExtractionError(
            f"Unsupported file type: {file_path.suffix or '(none)'}. "
            "Please upload a PDF, Word document (.docx), or text file (.txt).",
            source=str(file_path),
            recoverable=False,
        )

    size = file_path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise ExtractionError(
            "File size must be less than 10MB. Please choose a smaller file.",
            source=str(file_path),
            details={"file_size": size, "max_file_size": MAX_FILE_SIZE},
            recoverable=False,
        )

    return file_path


def _read_text_file(file_path: Path) -> tuple[str, Optional[int]]:
    return file_path.read_text(encoding="utf-8", errors="replace"), None


def _read_pdf(file_path: Path) -> tuple[str, Optional[int]]:
    try:
        reader = PdfReader(file_path)
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF: {e}", source=str(file_path))

    pages = []
    for page_num, page in enumerate(reader.pages, start=1):
        try:
            pages.append(page.extract_text() or "")
        except Exception as e:
            logger.warning("page_extraction_failed", page=page_num, error=str(e))
            pages.append("")

    return "\n".join(pages), len(reader.pages)


def _read_docx(file_path: Path) -> tuple[str, Optional[int]]:
    try:
        document = docx.Document(str(file_path))
    except Exception as e:
        raise ExtractionError(f"Failed to read Word document: {e}", source=str(file_path))

    return "\n".join(paragraph.text for paragraph in document.paragraphs), None


_READERS = {
    ".txt": _read_text_file,
    ".pdf": _read_pdf,
    ".docx": _read_docx,
}


def load_document(file_path: Union[str, Path]) -> ProcessedDocument:
    """
    Load a document and extract its text.

    Args:
        file_path: Path to a .txt, .pdf or .docx file

    Returns:
        ProcessedDocument with cleaned text and metadata

    Raises:
        ExtractionError: If the file is unsupported, unreadable or has no text
    """
    file_path = validate_file(file_path)
    extension = file_path.suffix.lower()

    logger.info("loading_document", file_path=str(file_path), file_type=extension)

    raw_text, page_count = _READERS[extension](file_path)
    text = clean_extracted_text(raw_text)

    if not text:
        raise ExtractionError(
            f"No readable text found in {extension} document. Please try copying "
            "the text manually or saving as a .txt file.",
            source=str(file_path),
        )

    metadata: dict[str, Any] = {
        "file_name": file_path.name,
        "file_size": file_path.stat().st_size,
        "file_type": extension,
        "page_count": page_count,
        "word_count": count_words(text),
    }

    logger.info(
        "document_loaded",
        file_path=str(file_path),
        characters=len(text),
        words=metadata["word_count"],
        pages=page_count,
    )

    return ProcessedDocument(text=text, metadata=metadata)
