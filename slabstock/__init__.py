# Slab stock check: reconcile physical slabs against the catalogue
# using OCR of the engraved slab/batch number.

from .models import SlabRecord, SlabStatus, SlabSource, SlabState, Candidate, OCRResult, ScanOutcome
from .errors import (
    SlabStockError,
    RecordValidationError,
    DuplicateRecordError,
    UnknownRecordError,
    NothingToExportError,
    StorageError,
    OCRError,
)
from .config import settings, get_settings, database_url
from .store import SlabStore
from .csv_codec import parse_csv, to_csv
from .extractor import normalize_ocr_text, extract_candidate
from .matcher import match_candidate
from .ocr import OCREngine, TesseractEngine, StaticOCREngine
from .forms import ManualEntry, ScanConfirmation
from .report import SlabFilter, filter_slabs, summarize_slabs, format_console, to_title
from .service import ReconciliationService

__version__ = "1.0.0"

__all__ = [
    # Models
    "SlabRecord",
    "SlabStatus",
    "SlabSource",
    "SlabState",
    "Candidate",
    "OCRResult",
    "ScanOutcome",
    # Errors
    "SlabStockError",
    "RecordValidationError",
    "DuplicateRecordError",
    "UnknownRecordError",
    "NothingToExportError",
    "StorageError",
    "OCRError",
    # Config
    "settings",
    "get_settings",
    "database_url",
    # Store
    "SlabStore",
    # CSV
    "parse_csv",
    "to_csv",
    # Extraction and matching
    "normalize_ocr_text",
    "extract_candidate",
    "match_candidate",
    # OCR
    "OCREngine",
    "TesseractEngine",
    "StaticOCREngine",
    # Forms
    "ManualEntry",
    "ScanConfirmation",
    # Report
    "SlabFilter",
    "filter_slabs",
    "summarize_slabs",
    "format_console",
    "to_title",
    # Service
    "ReconciliationService",
]
