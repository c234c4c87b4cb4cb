"""Merge a confirmed store result back into the cached record list.

The cache mirrors the store's order (date descending). These helpers never
re-sort it and never mutate the list they are given.
"""

import logging
from typing import List

from models import HealthRecord

logger = logging.getLogger(__name__)


def _index_of(records: List[HealthRecord], predicate) -> int:
    for i, r in enumerate(records):
        if predicate(r):
            return i
    return -1


def apply_update(records: List[HealthRecord], updated: HealthRecord) -> List[HealthRecord]:
    idx = _index_of(records, lambda r: r.id == updated.id)
    if idx < 0:
        logger.warning("Updated record %s is not in the cached list; leaving it unchanged", updated.id)
        return list(records)
    result = list(records)
    result[idx] = updated
    return result


def apply_upsert(records: List[HealthRecord], stored: HealthRecord) -> List[HealthRecord]:
    result = list(records)

    idx = _index_of(result, lambda r: r.id == stored.id)
    if idx < 0:
        # the store replaced the row for this date; drop our stale copy
        idx = _index_of(result, lambda r: r.date == stored.date)
    if idx >= 0:
        result[idx] = stored
        return result

    # new date: goes ahead of the first older entry (front of the list when newest)
    pos = _index_of(result, lambda r: r.date < stored.date)
    if pos < 0:
        pos = len(result)
    result.insert(pos, stored)
    return result


def apply_delete(records: List[HealthRecord], record_id: str) -> List[HealthRecord]:
    return [r for r in records if r.id != record_id]
