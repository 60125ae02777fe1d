"""
Tests for the slab matcher.

The matcher has simple logic:
- combined_id stored = match
- combined_id empty or not stored = no match (no fallback keys)
"""

from slabstock.extractor import extract_candidate
from slabstock.matcher import match_candidate
from slabstock.models import Candidate

from conftest import make_record


class TestMatchCandidate:
    async def test_exact_match(self, store):
        await store.put(make_record("00925/6217"))
        record = await match_candidate(Candidate(combined_id="00925/6217"), store)
        assert record is not None
        assert record.material == "CALACATTA GOLD"

    async def test_match_from_ocr_text(self, store):
        await store.put(make_record("00925/6217"))
        candidate = extract_candidate("slab 00925/6217 marble")
        assert (await match_candidate(candidate, store)).combined_id == "00925/6217"

    async def test_surrounding_whitespace_ignored(self, store):
        await store.put(make_record("00925/6217"))
        assert await match_candidate(Candidate(combined_id=" 00925/6217 "), store) is not None

    async def test_unknown_id(self, store):
        await store.put(make_record("00925/6217"))
        assert await match_candidate(Candidate(combined_id="00925/6218"), store) is None

    async def test_empty_id_never_matches(self, store):
        """Slab and batch numbers alone are never used as a key."""
        await store.put(make_record("00925/6217"))
        candidate = Candidate(
            combined_id="",
            slab_number="00925",
            batch_number="6217",
            dimensions="3200x1600",
            thickness_mm="20",
        )
        assert await match_candidate(candidate, store) is None

    async def test_whitespace_id_never_matches(self, store):
        await store.put(make_record("00925/6217"))
        assert await match_candidate(Candidate(combined_id="   "), store) is None

    async def test_empty_store(self, store):
        assert await match_candidate(Candidate(combined_id="00925/6217"), store) is None
