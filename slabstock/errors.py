"""
Exceptions raised by Slabstock.

Every refused user action raises a SlabStockError subclass. Nothing is
retried; the caller reports the message and moves on.
"""


class SlabStockError(Exception):
    """Base class for all Slabstock failures."""


class RecordValidationError(SlabStockError, ValueError):
    """Input was rejected before anything was written."""


class DuplicateRecordError(RecordValidationError):
    """Manual create with a combined_id that is already stored."""

    def __init__(self, combined_id: str):
        self.combined_id = combined_id
        super().__init__(
            f"A slab with combined ID {combined_id!r} already exists in the current data"
        )


class UnknownRecordError(RecordValidationError):
    """Confirm or toggle of a combined_id that is not stored."""

    def __init__(self, combined_id: str):
        self.combined_id = combined_id
        super().__init__(
            f"Combined ID {combined_id!r} does not exist in the current slabs data"
        )


class NothingToExportError(RecordValidationError):
    """Export requested while the store is empty."""

    def __init__(self):
        super().__init__("No slabs to export")


class StorageError(SlabStockError):
    """The underlying database failed; the whole operation was rolled back."""


class OCRError(SlabStockError):
    """The OCR engine could not process an image."""
