"""
Test configuration and fixtures for the Slabstock test suite.

Provides:
- A fresh SQLite store in a temp directory (isolated per test)
- A ReconciliationService with a deterministic clock
- Sample CSV text and factory functions for records
"""
from pathlib import Path

import pytest

from slabstock.config import database_url
from slabstock.models import SlabRecord
from slabstock.service import ReconciliationService
from slabstock.store import SlabStore

BASELINE_CSV = Path(__file__).parent.parent / "data" / "slabs.csv"

SAMPLE_CSV = """combined_id,slab_number,batch_number,material_name,size_mm,thickness_mm,colour_family,location,received_date,notes
00925/6217,00925,6217,Calacatta Gold,3200x1600,20,White,Rack A1,2024-03-12,
,01140,6305,nero marquina,3000x1400,30,Black,Rack B2,2024-05-02,
,02210,,Taj Mahal,3100x1800,20,Beige,Rack C1,2024-07-19,short row
"""


class FakeClock:
    """Returns a strictly increasing ISO timestamp on every call."""

    def __init__(self):
        self.ticks = 0

    def __call__(self) -> str:
        self.ticks += 1
        return f"2026-01-20T09:00:{self.ticks:02d}+00:00"


# ---------------------------------------------------------------------------
# Store and service fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def store(tmp_path):
    """Open a store on a temp database file and close it after the test."""
    s = await SlabStore.open(database_url(tmp_path / "slabs.db"))
    yield s
    await s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, clock):
    return ReconciliationService(store, clock=clock)


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV


# ---------------------------------------------------------------------------
# Factory functions
# ---------------------------------------------------------------------------

def make_record(combined_id: str = "00925/6217", **overrides) -> SlabRecord:
    """Build a catalogue-style record; slab/batch derived from the id."""
    slab, _, batch = combined_id.partition("/")
    values = dict(
        combined_id=combined_id,
        slab_number=slab,
        batch_number=batch,
        material="CALACATTA GOLD",
        dimensions="3200x1600",
        thickness_mm="20",
    )
    values.update(overrides)
    return SlabRecord(**values)
