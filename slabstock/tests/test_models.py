"""
Tests for the slab state machine, records and input forms.
"""

import pytest

from slabstock.errors import RecordValidationError
from slabstock.forms import ManualEntry, ScanConfirmation, parse_form
from slabstock.models import Candidate, ScanOutcome, SlabSource, SlabState, SlabStatus

from conftest import make_record


# ============================================================================
# SlabState
# ============================================================================

class TestSlabState:
    @pytest.mark.parametrize("state", list(SlabState))
    def test_toggle_twice_is_identity(self, state):
        assert state.toggled().toggled() is state

    @pytest.mark.parametrize("state,expected", [
        (SlabState.UNSEEN_AVAILABLE, SlabState.UNSEEN_USED),
        (SlabState.UNSEEN_USED, SlabState.UNSEEN_AVAILABLE),
        (SlabState.SEEN_AVAILABLE, SlabState.SEEN_USED),
        (SlabState.SEEN_USED, SlabState.SEEN_AVAILABLE),
    ])
    def test_toggle_keeps_seen(self, state, expected):
        assert state.toggled() is expected

    @pytest.mark.parametrize("state", list(SlabState))
    def test_confirm_always_seen(self, state):
        assert state.confirmed(SlabStatus.USED) is SlabState.SEEN_USED
        assert state.confirmed(SlabStatus.AVAILABLE) is SlabState.SEEN_AVAILABLE

    def test_from_flags_accepts_strings(self):
        assert SlabState.from_flags("used", False) is SlabState.UNSEEN_USED


class TestSlabRecord:
    def test_defaults(self):
        record = make_record()
        assert record.state is SlabState.UNSEEN_AVAILABLE
        assert record.source is SlabSource.CSV
        assert not record.seen

    def test_string_enums_coerced(self):
        record = make_record(status="used", source="manual")
        assert record.status is SlabStatus.USED
        assert record.source is SlabSource.MANUAL

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            make_record(status="broken")

    def test_copy_leaves_original(self):
        record = make_record()
        changed = record.copy(status=SlabStatus.USED)
        assert record.status is SlabStatus.AVAILABLE
        assert changed.status is SlabStatus.USED

    def test_to_dict(self):
        data = make_record(last_seen="2026-01-20T09:00:01+00:00").to_dict()
        assert data["status"] == "available"
        assert data["source"] == "csv"
        assert data["last_seen"] == "2026-01-20T09:00:01+00:00"


class TestScanOutcome:
    def test_prefill_from_candidate(self):
        candidate = Candidate(combined_id="00111/2222", dimensions="1200x1600", raw_ocr_text="x")
        outcome = ScanOutcome(candidate=candidate, match=None, text="x", confidence=40)
        prefill = outcome.prefill()
        assert prefill["combined_id"] == "00111/2222"
        assert prefill["material"] == ""
        assert prefill["ocr_confidence"] == 40

    def test_prefill_prefers_match(self):
        candidate = Candidate(combined_id="00925/6217", dimensions="1200x1600")
        outcome = ScanOutcome(candidate=candidate, match=make_record(), text="", confidence=0)
        assert outcome.prefill()["dimensions"] == "3200x1600"


# ============================================================================
# Forms
# ============================================================================

class TestForms:
    def test_manual_entry_strips_and_uppercases(self):
        entry = parse_form(ManualEntry, {"combined_id": " A1 ", "material": " granite "})
        assert entry.combined_id == "A1"
        assert entry.material == "GRANITE"
        assert entry.status is SlabStatus.AVAILABLE

    def test_instance_passes_through(self):
        entry = ManualEntry(combined_id="A1")
        assert parse_form(ManualEntry, entry) is entry

    @pytest.mark.parametrize("data", [{}, {"combined_id": ""}, {"combined_id": "  "}])
    def test_combined_id_required(self, data):
        with pytest.raises(RecordValidationError, match="Combined ID is required"):
            parse_form(ManualEntry, data)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_form(ScanConfirmation, {"combined_id": "A1", "ocr_confidence": -1})

    def test_confirmation_optional_fields(self):
        confirmation = parse_form(ScanConfirmation, {"combined_id": "A1"})
        assert confirmation.status is None
        assert confirmation.raw_ocr_text is None
        assert confirmation.ocr_confidence is None
