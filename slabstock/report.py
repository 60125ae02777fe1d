"""
Report Generator - Filter, count and format slabs for people.

Display formatting (title-cased materials, Seen/Missing labels) happens
here and is never written back to the store.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import SlabRecord, SlabStatus

STATUS_FILTERS = ("available", "used", "seen", "missing")

_WORD_START = re.compile(r"\b\w")
_WHITESPACE = re.compile(r"\s+")


def to_title(text: str) -> str:
    """'CALACATTA  GOLD' -> 'Calacatta Gold'"""
    if not text:
        return ""
    t = _WORD_START.sub(lambda m: m.group(0).upper(), text.lower())
    return _WHITESPACE.sub(" ", t).strip()


@dataclass
class SlabFilter:
    """
    List filters. Text filters are case-insensitive substring matches;
    status is one of STATUS_FILTERS or None for everything.
    """
    batch: str = ""
    slab: str = ""
    material: str = ""
    status: Optional[str] = None

    def __post_init__(self):
        if self.status and self.status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {self.status}")

    def matches(self, record: SlabRecord) -> bool:
        if self.batch and self.batch.strip().upper() not in record.batch_number.upper():
            return False
        if self.slab and self.slab.strip().upper() not in record.slab_number.upper():
            return False
        if self.material and self.material.strip().upper() not in record.material.upper():
            return False

        if self.status == "available" and record.status != SlabStatus.AVAILABLE:
            return False
        if self.status == "used" and record.status != SlabStatus.USED:
            return False
        if self.status == "seen" and not record.seen:
            return False
        if self.status == "missing" and record.seen:
            return False

        return True


def filter_slabs(records: Iterable[SlabRecord], slab_filter: Optional[SlabFilter] = None) -> list[SlabRecord]:
    records = list(records)
    if slab_filter is None:
        return records
    return [r for r in records if slab_filter.matches(r)]


def sort_slabs(records: Iterable[SlabRecord]) -> list[SlabRecord]:
    """Stable display order: batch, then slab number, then id."""
    return sorted(records, key=lambda r: (r.batch_number, r.slab_number, r.combined_id))


def summarize_slabs(records: Iterable[SlabRecord]) -> dict:
    """Generate counters for a set of slabs."""
    counts = {
        "total": 0,
        "available": 0,
        "used": 0,
        "seen": 0,
        "missing": 0,
    }

    for record in records:
        counts["total"] += 1
        if record.status == SlabStatus.USED:
            counts["used"] += 1
        else:
            counts["available"] += 1
        if record.seen:
            counts["seen"] += 1

    counts["missing"] = counts["total"] - counts["seen"]
    return counts


def format_console(records: list[SlabRecord], summary: Optional[dict] = None) -> str:
    """
    Format slabs as a console table followed by counters.

    Args:
        records: Slabs to show (already filtered)
        summary: Counters for the whole store; computed from records if omitted

    Returns:
        Formatted string for console output
    """
    if summary is None:
        summary = summarize_slabs(records)

    lines = []
    if not records:
        lines.append("No slabs to show.")
    else:
        lines.append(
            f"{'SLAB':<8} {'BATCH':<8} {'MATERIAL':<24} {'SIZE':<11} {'MM':>4} {'STATUS':<10} {'SEEN':<7}"
        )
        lines.append("-" * 78)
        for r in sort_slabs(records):
            seen_label = "Seen" if r.seen else "Missing"
            lines.append(
                f"{r.slab_number:<8} {r.batch_number:<8} {to_title(r.material)[:24]:<24} "
                f"{r.dimensions:<11} {r.thickness_mm:>4} {r.status.value:<10} {seen_label:<7}"
            )

    lines.append("")
    lines.append(
        f"Total: {summary['total']}  Available: {summary['available']}  Used: {summary['used']}  "
        f"Seen: {summary['seen']}  Missing: {summary['missing']}"
    )
    return "\n".join(lines)


def format_scan(prefill: dict, matched: bool) -> str:
    """Describe a scan result the way the confirm step shows it."""
    if matched:
        header = "Matched slab from CSV."
    else:
        header = "No matching slab found for combined ID: " + (prefill.get("combined_id") or "(not detected)")

    lines = [header]
    for key in ("combined_id", "slab_number", "batch_number", "material", "dimensions", "thickness_mm"):
        value = prefill.get(key) or ""
        if key == "material":
            value = to_title(value)
        lines.append(f"  {key:<14} {value}")
    lines.append(f"  {'confidence':<14} {prefill.get('ocr_confidence', 0)}")
    return "\n".join(lines)
