"""SQLAlchemy ORM models for the slab store."""

from typing import Optional

from sqlalchemy import JSON, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base

# Fixed dictionary keys
MATERIALS_KEY = "materials"
BASELINE_KEY = "baseline"  # [timestamp] once the bundled catalogue has been loaded


class Slab(Base):
    """One stored slab, keyed by its combined identifier."""
    __tablename__ = "slabs"

    combined_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    slab_number: Mapped[str] = mapped_column(String(50), default="")
    batch_number: Mapped[str] = mapped_column(String(50), default="")
    material: Mapped[str] = mapped_column(String(200), default="")
    dimensions: Mapped[str] = mapped_column(String(50), default="")
    thickness_mm: Mapped[str] = mapped_column(String(20), default="")
    colour_family: Mapped[str] = mapped_column(String(100), default="")
    location: Mapped[str] = mapped_column(String(100), default="")
    received_date: Mapped[str] = mapped_column(String(50), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default="available")
    last_seen: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    raw_ocr_text: Mapped[str] = mapped_column(Text, default="")
    ocr_confidence: Mapped[float] = mapped_column(Float, default=0)
    source: Mapped[str] = mapped_column(String(20), default="csv")


class DictionaryEntry(Base):
    """Single-key lists such as the materials vocabulary."""
    __tablename__ = "dictionary"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    values: Mapped[list] = mapped_column(JSON, default=list)
