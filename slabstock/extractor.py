"""
OCR text normalization and field extraction.

Slab labels carry a fixed "<slab>/<batch>" number, usually with a size
and thickness nearby. Each field is found by its own regex over the
normalized text; a rule that finds nothing leaves its field empty and
never affects the others.

    "SLAB 00925/6217 MARBLE 1200 x 1600 2CM"
    -> combined_id="00925/6217", slab_number="00925", batch_number="6217",
       dimensions="1200x1600", thickness_mm="20"
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .models import Candidate

MULTIPLICATION_SIGN = "×"

# ASCII digits only; OCR noise can produce other Unicode digits
COMBINED_ID_RE = re.compile(r"\b[0-9]{3,5}/[0-9]{3,5}\b")
SLAB_NUMBER_RE = re.compile(r"\b[0-9]{3,5}(?=/)")
BATCH_NUMBER_RE = re.compile(r"/([0-9]{3,5})\b")
DIMENSIONS_RE = re.compile(r"([0-9]{3,4})\s*[xX]\s*([0-9]{3,4})")
THICKNESS_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*(CM|MM)\b")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_ocr_text(text: str) -> str:
    """
    Canonical form of OCR output for matching.

    Upper-cases, turns "×" into the letter X, collapses whitespace, trims.
    Applying it twice gives the same result as applying it once.
    """
    if not text:
        return ""
    # Upper-case X, not "x": a lower-case letter would change on the next
    # upper() and the function would no longer be idempotent
    t = text.upper().replace(MULTIPLICATION_SIGN, "X")
    return _WHITESPACE_RE.sub(" ", t).strip()


def _first(pattern: re.Pattern, text: str, group: int = 0) -> str:
    m = pattern.search(text)
    return m.group(group) if m else ""


def extract_dimensions(text: str) -> str:
    m = DIMENSIONS_RE.search(text)
    return f"{m.group(1)}x{m.group(2)}" if m else ""


def extract_thickness_mm(text: str) -> str:
    """
    Thickness in whole millimetres.

    "2CM" -> "20", "7.4 MM" -> "7", "1.25 CM" -> "13" (halves round up).
    """
    m = THICKNESS_RE.search(text)
    if not m:
        return ""
    value = Decimal(m.group(1))
    if m.group(2) == "CM":
        value *= 10
    try:
        return str(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # digit run too long to be a thickness
        return ""


def extract_candidate(text: str) -> Candidate:
    """
    Build a partial record from raw OCR text.

    Never raises on odd input; fields that cannot be found are "".

    Args:
        text: Text exactly as returned by the OCR engine

    Returns:
        Candidate with whatever could be located
    """
    src = normalize_ocr_text(text or "")

    return Candidate(
        combined_id=_first(COMBINED_ID_RE, src),
        slab_number=_first(SLAB_NUMBER_RE, src),
        batch_number=_first(BATCH_NUMBER_RE, src, group=1),
        dimensions=extract_dimensions(src),
        thickness_mm=extract_thickness_mm(src),
        raw_ocr_text=text or "",
    )
