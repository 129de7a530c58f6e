"""Text extraction for wish supporting documents.

Charities upload medical statements, enrollment letters, invoices and
estimates as PDFs, phone photos or plain text. The text is used to
classify the document and to fingerprint it for duplicate detection.
"""

import hashlib
import logging
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pdfplumber

# pdfminer warns about every font with a missing FontBBox
for _name in ("pdfminer", "pdfminer.six", "pdfplumber", "pypdf"):
    logging.getLogger(_name).setLevel(logging.ERROR)
import pytesseract
from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image

from .models import DocumentType

logger = logging.getLogger(__name__)

# Where the Windows installer puts tesseract.exe
WINDOWS_TESSERACT = (
    r'C:\Program Files\Tesseract-OCR\tesseract.exe',
    r'C:\Program Files (x86)\Tesseract-OCR\tesseract.exe',
)

OCR_DPI = 300
IMAGE_SUFFIXES = ('.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp')


@dataclass
class ParsedDocument:
    """Extracted text of one uploaded document."""
    file_path: str
    file_type: str  # 'pdf', 'image' or 'text'
    text_content: str
    page_count: int = 1


def configure_tesseract(tesseract_path: Optional[str] = None) -> None:
    """Point pytesseract at an explicit binary, or a known Windows install."""
    if tesseract_path:
        pytesseract.pytesseract.tesseract_cmd = tesseract_path
        return
    found = next((p for p in WINDOWS_TESSERACT if os.path.isfile(p)), None)
    if found:
        pytesseract.pytesseract.tesseract_cmd = found


def _ocr_images(images) -> str:
    pages = [pytesseract.image_to_string(img) for img in images]
    return '\n\n'.join(p for p in pages if p)


class DocumentParser:
    """Extract text from uploaded wish documents."""

    # A text layer shorter than this per page is treated as a scan
    MIN_TEXT_PER_PAGE = 50

    def __init__(self, tesseract_path: Optional[str] = None):
        """
        Args:
            tesseract_path: Tesseract executable, when it is not on PATH.
        """
        configure_tesseract(tesseract_path)
        self._readers: Dict[str, Callable[[str], ParsedDocument]] = {
            '.pdf': self._parse_pdf,
            '.txt': self._parse_text,
        }
        for suffix in IMAGE_SUFFIXES:
            self._readers[suffix] = self._parse_image

    @property
    def supported_extensions(self) -> List[str]:
        return sorted(self._readers)

    def parse(self, file_path: str) -> ParsedDocument:
        """
        Read a document with the reader for its extension.

        Raises:
            ValueError: for unsupported file types.
        """
        suffix = Path(file_path).suffix.lower()
        reader = self._readers.get(suffix)
        if reader is None:
            raise ValueError(f"Unsupported document type {suffix or '(none)'}: {file_path}")
        return reader(file_path)

    def extract_text(self, file_path: str) -> str:
        """Parse a document and return its stripped text."""
        return self.parse(file_path).text_content.strip()

    def _parse_pdf(self, file_path: str) -> ParsedDocument:
        """
        Use the PDF text layer, falling back to OCR for scans.

        Receipts and enrollment letters are often phone scans saved as
        PDF, so a thin text layer goes through Tesseract.
        """
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message=".*[Ff]ont[Bb]ox.*")
            warnings.filterwarnings("ignore", message=".*font descriptor.*")
            with pdfplumber.open(file_path) as pdf:
                page_count = max(len(pdf.pages), 1)
                text = '\n\n'.join(page.extract_text() or '' for page in pdf.pages)

        if len(text.strip()) < self.MIN_TEXT_PER_PAGE * page_count:
            scanned = self._ocr_pdf(file_path)
            if scanned.strip():
                logger.debug("Using OCR text for %s", file_path)
                text = scanned

        return ParsedDocument(file_path, 'pdf', text, page_count)

    def _ocr_pdf(self, file_path: str) -> str:
        """Rasterize each page and OCR it."""
        try:
            images = convert_from_path(file_path, dpi=OCR_DPI)
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as e:
            # poppler missing or unreadable file - render via pdfplumber
            logger.debug("pdf2image failed for %s (%s); rendering with pdfplumber", file_path, e)
            with pdfplumber.open(file_path) as pdf:
                images = [page.to_image(resolution=OCR_DPI).original for page in pdf.pages]
        return _ocr_images(images)

    def _parse_image(self, file_path: str) -> ParsedDocument:
        with Image.open(file_path) as img:
            rgb = img if img.mode == 'RGB' else img.convert('RGB')
            text = pytesseract.image_to_string(rgb)
        return ParsedDocument(file_path, 'image', text)

    def _parse_text(self, file_path: str) -> ParsedDocument:
        text = Path(file_path).read_text(encoding="utf-8", errors="replace")
        return ParsedDocument(file_path, 'text', text)

    def parse_multiple(self, file_paths: List[str]) -> List[ParsedDocument]:
        """Parse several documents, skipping any that fail."""
        parsed = []
        for path in file_paths:
            try:
                parsed.append(self.parse(path))
            except Exception as e:
                logger.warning("Skipping %s: %s", path, e)
        return parsed


# Checked in order; the first keyword hit decides the type.
DOCUMENT_TYPE_KEYWORDS = [
    (DocumentType.MEDICAL, ('medical', 'hospital', 'doctor')),
    (DocumentType.ENROLLMENT, ('enrollment', 'student', 'education')),
    (DocumentType.INVOICE, ('invoice', 'bill')),
    (DocumentType.ESTIMATE, ('estimate', 'quote')),
]


def detect_document_type(text: str) -> DocumentType:
    """Classify a document from keywords in its extracted text."""
    lowered = text.lower()
    for doc_type, keywords in DOCUMENT_TYPE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return doc_type
    return DocumentType.OTHER


def document_hash(text: str) -> str:
    """Stable fingerprint of a document's text for duplicate detection."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
