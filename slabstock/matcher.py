"""
Slab Matcher - resolve an OCR candidate to a stored slab.

Matching is by combined_id only. Slab number, batch number, size and
thickness are each far less discriminating than the composite id and
more likely to be misread, so they are never used as fallback keys.
"""

import logging
from typing import Optional

from .models import Candidate, SlabRecord
from .store import SlabStore

logger = logging.getLogger(__name__)


async def match_candidate(candidate: Candidate, store: SlabStore) -> Optional[SlabRecord]:
    """
    Look up the stored slab for a candidate.

    Args:
        candidate: Extractor output
        store: Open slab store

    Returns:
        The stored SlabRecord, or None when the candidate has no
        combined_id or the id is not stored
    """
    combined_id = (candidate.combined_id or "").strip()
    if not combined_id:
        logger.debug("No combined ID in candidate, skipping lookup")
        return None

    record = await store.get(combined_id)
    if record is None:
        logger.info("No stored slab for combined ID %s", combined_id)
    return record
