"""
Data models for Slabstock.

All structured data uses dataclasses for type hints, __eq__, and __repr__.
Timestamps are ISO-8601 strings, the same shape they are persisted in.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional


class SlabStatus(str, Enum):
    AVAILABLE = "available"
    USED = "used"

    def flipped(self) -> "SlabStatus":
        return SlabStatus.USED if self is SlabStatus.AVAILABLE else SlabStatus.AVAILABLE


class SlabSource(str, Enum):
    """Where a record was first created."""
    CSV = "csv"
    MANUAL = "manual"


class SlabState(Enum):
    """
    Reconciliation state of a slab.

    Derived from two facts on the record:
    - status: available / used
    - seen: has last_seen been set by a scan or manual entry

    UNSEEN_USED is a legitimate state (a catalogue row imported as used,
    or toggled before the walk reached it).
    """
    UNSEEN_AVAILABLE = ("available", False)
    UNSEEN_USED = ("used", False)
    SEEN_AVAILABLE = ("available", True)
    SEEN_USED = ("used", True)

    @classmethod
    def from_flags(cls, status: SlabStatus, seen: bool) -> "SlabState":
        return cls((SlabStatus(status).value, bool(seen)))

    @property
    def status(self) -> SlabStatus:
        return SlabStatus(self.value[0])

    @property
    def seen(self) -> bool:
        return self.value[1]

    def toggled(self) -> "SlabState":
        """Flip available/used, keep seen-ness."""
        return SlabState.from_flags(self.status.flipped(), self.seen)

    def confirmed(self, status: SlabStatus) -> "SlabState":
        """A physical sighting: always seen, with the confirmed status."""
        return SlabState.from_flags(status, True)


@dataclass
class SlabRecord:
    """
    A single physical slab.

    combined_id is the only key - usually "<slab_number>/<batch_number>".
    material is stored upper-cased; title-casing happens at display time.
    """
    combined_id: str
    slab_number: str = ""
    batch_number: str = ""
    material: str = ""
    dimensions: str = ""        # "<width>x<height>"
    thickness_mm: str = ""      # integer millimetres as text
    colour_family: str = ""
    location: str = ""
    received_date: str = ""
    notes: str = ""
    status: SlabStatus = SlabStatus.AVAILABLE
    last_seen: Optional[str] = None   # None = never physically confirmed
    raw_ocr_text: str = ""
    ocr_confidence: float = 0
    source: SlabSource = SlabSource.CSV

    def __post_init__(self):
        self.status = SlabStatus(self.status)
        self.source = SlabSource(self.source)

    @property
    def seen(self) -> bool:
        return bool(self.last_seen)

    @property
    def state(self) -> SlabState:
        return SlabState.from_flags(self.status, self.seen)

    def copy(self, **changes) -> "SlabRecord":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["status"] = self.status.value
        data["source"] = self.source.value
        return data


@dataclass
class Candidate:
    """
    Best-effort fields pulled out of OCR text.

    Any field that could not be located is an empty string.
    raw_ocr_text is the text exactly as the OCR engine returned it.
    """
    combined_id: str = ""
    slab_number: str = ""
    batch_number: str = ""
    dimensions: str = ""
    thickness_mm: str = ""
    raw_ocr_text: str = ""

    @property
    def is_empty(self) -> bool:
        return not any((
            self.combined_id, self.slab_number, self.batch_number,
            self.dimensions, self.thickness_mm,
        ))


@dataclass
class OCRResult:
    """Output of a single recognize() call."""
    text: str
    confidence: float = 0  # 0-100


@dataclass
class ScanOutcome:
    """
    Result of scanning one capture: what was read and what it matched.

    match is None when the candidate has no combined_id or the id is not
    in the store. prefill() gives the values offered to the user for
    confirmation or correction.
    """
    candidate: Candidate
    match: Optional[SlabRecord]
    text: str
    confidence: float

    @property
    def matched(self) -> bool:
        return self.match is not None

    def prefill(self) -> dict:
        source = self.match if self.match is not None else self.candidate
        return {
            "combined_id": source.combined_id,
            "slab_number": source.slab_number,
            "batch_number": source.batch_number,
            "material": self.match.material if self.match is not None else "",
            "dimensions": source.dimensions,
            "thickness_mm": source.thickness_mm,
            "raw_ocr_text": self.text,
            "ocr_confidence": self.confidence,
        }
