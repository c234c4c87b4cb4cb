import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from analytics import round1
from models import HealthRecord

PER_PAGE = 10
LARGE_SWING = 1.5


@dataclass(frozen=True)
class Page:
    items: List[HealthRecord]
    page: int
    total_pages: int
    total: int


def filter_by_date(records: List[HealthRecord], start: Optional[date] = None,
                   end: Optional[date] = None) -> List[HealthRecord]:
    """Keep records with start <= date <= end; either bound may be omitted."""
    return [
        r for r in records
        if (start is None or r.date >= start) and (end is None or r.date <= end)
    ]


def paginate(records: List[HealthRecord], page: int = 1, per_page: int = PER_PAGE) -> Page:
    total = len(records)
    total_pages = math.ceil(total / per_page) if total else 0
    page = max(1, min(page, total_pages or 1))
    start = (page - 1) * per_page
    return Page(items=records[start:start + per_page], page=page,
                total_pages=total_pages, total=total)


def history_row(record: HealthRecord) -> dict:
    diff = round1(record.weight_diff)
    row = record.to_dict()
    row["weightDiff"] = diff
    row["largeSwing"] = diff > LARGE_SWING
    return row
