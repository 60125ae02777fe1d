"""
Reconciliation Service - every user action on the slab store.

Each slab is in one of four states (see SlabState):

| status    | seen? | State            |
|-----------|-------|------------------|
| available | no    | UNSEEN_AVAILABLE |
| used      | no    | UNSEEN_USED      |
| available | yes   | SEEN_AVAILABLE   |
| used      | yes   | SEEN_USED        |

Transitions:
- baseline seed / CSV import: new rows start UNSEEN_*
- manual create: new row starts SEEN_* (the user is looking at it)
- scan confirm: any state -> SEEN_<confirmed status>
- status toggle: flips available/used, seen-ness unchanged

Refused actions raise a SlabStockError subclass before anything is written.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .csv_codec import parse_csv, to_csv
from .errors import (
    DuplicateRecordError,
    NothingToExportError,
    RecordValidationError,
    UnknownRecordError,
)
from .extractor import extract_candidate
from .forms import ManualEntry, ScanConfirmation, parse_form
from .matcher import match_candidate
from .models import ScanOutcome, SlabRecord, SlabSource, SlabStatus
from .ocr import ImageInput, OCREngine
from .report import SlabFilter, filter_slabs, summarize_slabs, to_title
from .store import SlabStore

logger = logging.getLogger(__name__)


def now() -> str:
    """Current UTC time as an ISO string."""
    return datetime.now(timezone.utc).isoformat()


def distinct_materials(records: Iterable[SlabRecord]) -> list[str]:
    """Upper-cased materials in first-seen order, blanks dropped."""
    seen = {}
    for record in records:
        material = (record.material or "").strip().upper()
        if material:
            seen.setdefault(material, None)
    return list(seen)


class ReconciliationService:
    """
    Owns the slab store for one session and runs each user action on it.

    Args:
        store: Open SlabStore
        ocr: Engine used by scan(); optional if scanning is never used
        clock: Returns the current timestamp string (injectable for tests)
    """

    def __init__(
        self,
        store: SlabStore,
        ocr: Optional[OCREngine] = None,
        clock: Callable[[], str] = now,
    ):
        self.store = store
        self.ocr = ocr
        self.clock = clock

    # === Bulk loads ===

    async def ensure_baseline(self, csv_path: Union[str, Path]) -> int:
        """
        Seed an empty store from the bundled catalogue.

        Runs at most once per store: skipped when the store has slabs or
        the baseline was loaded before (even if the slabs were cleared
        since). A missing or empty baseline file is logged and skipped.

        Returns:
            Number of slabs loaded
        """
        if await self.store.count() or await self.store.baseline_loaded_at():
            return 0

        path = Path(csv_path)
        if not path.exists():
            logger.error("Baseline CSV not found: %s", path)
            return 0

        records = parse_csv(path.read_text(encoding="utf-8-sig"))
        if not records:
            logger.warning("No rows parsed from baseline CSV %s", path)
            return 0

        await self.store.put_many(
            records,
            materials=distinct_materials(records),
            baseline_loaded_at=self.clock(),
        )
        logger.info("Seeded %d slabs from %s", len(records), path.name)
        return len(records)

    async def import_csv(self, text: str) -> int:
        """
        Replace every stored slab with the rows of a CSV.

        Prior seen/used state is discarded. The materials list is rebuilt
        from the new rows only.

        Returns:
            Number of slabs loaded
        """
        records = parse_csv(text)
        await self.store.replace_all(records, materials=distinct_materials(records))
        logger.info("Imported %d slabs (store replaced)", len(records))
        return len(records)

    # === Single-record actions ===

    async def create_manual(self, entry: Union[ManualEntry, dict]) -> SlabRecord:
        """
        Add a slab that is not in the catalogue.

        The id must be new. The slab counts as seen now, at full confidence.
        """
        entry = parse_form(ManualEntry, entry)

        if await self.store.get(entry.combined_id) is not None:
            logger.warning("Manual create refused, %s already exists", entry.combined_id)
            raise DuplicateRecordError(entry.combined_id)

        record = SlabRecord(
            **entry.model_dump(),
            last_seen=self.clock(),
            raw_ocr_text="",
            ocr_confidence=100,
            source=SlabSource.MANUAL,
        )
        await self.store.put(record)
        if record.material:
            await self.add_material(record.material)

        logger.info("Created slab %s manually", record.combined_id)
        return record

    async def scan(self, image: ImageInput) -> ScanOutcome:
        """
        Read one capture and look it up.

        Nothing is written; the outcome is offered to the user, who then
        calls confirm_scan (or create_manual for a new slab).
        """
        if self.ocr is None:
            raise RecordValidationError("No OCR engine configured")

        result = self.ocr.recognize(image)
        candidate = extract_candidate(result.text)
        match = await match_candidate(candidate, self.store)
        return ScanOutcome(
            candidate=candidate,
            match=match,
            text=result.text,
            confidence=result.confidence,
        )

    async def confirm_scan(self, confirmation: Union[ScanConfirmation, dict]) -> SlabRecord:
        """
        Mark an existing slab as physically seen.

        Unknown ids are refused; only create_manual introduces new ids.
        """
        confirmation = parse_form(ScanConfirmation, confirmation)

        record = await self.store.get(confirmation.combined_id)
        if record is None:
            logger.warning("Confirm refused, %s is not stored", confirmation.combined_id)
            raise UnknownRecordError(confirmation.combined_id)

        state = record.state.confirmed(confirmation.status or record.status or SlabStatus.AVAILABLE)
        updated = record.copy(
            status=state.status,
            last_seen=self.clock(),
            raw_ocr_text=(
                confirmation.raw_ocr_text
                if confirmation.raw_ocr_text is not None else record.raw_ocr_text
            ),
            ocr_confidence=(
                confirmation.ocr_confidence
                if confirmation.ocr_confidence is not None else record.ocr_confidence
            ),
            source=record.source or SlabSource.CSV,
        )
        await self.store.put(updated)
        logger.info("Confirmed slab %s as %s", updated.combined_id, updated.status.value)
        return updated

    async def toggle_status(self, combined_id: str) -> SlabRecord:
        """Flip available/used in place. last_seen is left alone."""
        combined_id = (combined_id or "").strip()
        if not combined_id:
            raise RecordValidationError("Combined ID is required")

        record = await self.store.get(combined_id)
        if record is None:
            raise UnknownRecordError(combined_id)

        updated = record.copy(status=record.state.toggled().status)
        await self.store.put(updated)
        return updated

    async def clear_all(self):
        """Remove every slab. The materials list is kept."""
        await self.store.clear()
        logger.info("Cleared all slabs")

    # === Reads ===

    async def export_csv(self) -> str:
        records = await self.store.get_all()
        if not records:
            raise NothingToExportError()
        return to_csv(records)

    async def list_slabs(self, slab_filter: Optional[SlabFilter] = None) -> list[SlabRecord]:
        return filter_slabs(await self.store.get_all(), slab_filter)

    async def summary(self) -> dict:
        return summarize_slabs(await self.store.get_all())

    # === Materials ===

    async def add_material(self, name: str):
        """Union one material into the vocabulary."""
        material = (name or "").strip().upper()
        if not material:
            return
        materials = await self.store.load_materials()
        if material not in materials:
            materials.append(material)
            await self.store.save_materials(materials)

    async def material_suggestions(self) -> list[str]:
        """Known materials, title-cased for display."""
        return [to_title(m) for m in await self.store.load_materials()]
