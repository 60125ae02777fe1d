"""Pydantic v2 models for validating manual-entry and scan-confirm input."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import RecordValidationError
from .models import SlabStatus


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class ManualEntry(_Form):
    combined_id: str = Field(..., min_length=1, max_length=100)
    slab_number: str = ""
    batch_number: str = ""
    material: str = ""
    dimensions: str = ""
    thickness_mm: str = ""
    colour_family: str = ""
    location: str = ""
    received_date: str = ""
    notes: str = ""
    status: SlabStatus = SlabStatus.AVAILABLE

    @field_validator("material")
    @classmethod
    def upper_material(cls, v: str) -> str:
        return v.upper()


class ScanConfirmation(_Form):
    combined_id: str = Field(..., min_length=1, max_length=100)
    status: Optional[SlabStatus] = None
    raw_ocr_text: Optional[str] = None
    ocr_confidence: Optional[float] = Field(default=None, ge=0, le=100)


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "input"
        if loc == "combined_id" and err.get("type") in ("string_too_short", "missing"):
            return "Combined ID is required"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_form(form_cls, data):
    """
    Validate a form, turning pydantic errors into RecordValidationError.

    Accepts an instance of form_cls (returned as-is) or a dict.
    """
    if isinstance(data, form_cls):
        return data
    try:
        return form_cls.model_validate(data)
    except ValidationError as e:
        raise RecordValidationError(_describe(e)) from e
