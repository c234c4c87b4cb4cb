from dataclasses import dataclass, replace
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class HealthRecord:
    """One day of measurements. `id` stays None until the store assigns one."""
    date: date
    morning_weight: float
    evening_weight: float
    has_bm: bool = False
    bm_count: int = 0
    notes: Optional[str] = None
    id: Optional[str] = None

    @property
    def weight_diff(self) -> float:
        return self.evening_weight - self.morning_weight

    def with_id(self, record_id: Optional[str]) -> "HealthRecord":
        return replace(self, id=record_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "morningWeight": self.morning_weight,
            "eveningWeight": self.evening_weight,
            "bmCount": self.bm_count,
            "hasBM": self.has_bm,
            "notes": self.notes,
        }


# ============================================================
# Wire mapping (health_records row <-> HealthRecord)
# ============================================================
def encode_record(record: HealthRecord, user_id: Optional[str] = None) -> dict:
    """Build the row payload for the store. The id is never written."""
    payload = {
        "date": record.date.isoformat(),
        "morning_weight": record.morning_weight,
        "evening_weight": record.evening_weight,
        "bm_count": record.bm_count,
        "has_bm": record.has_bm,
        "notes": record.notes,
    }
    if user_id is not None:
        payload["user_id"] = user_id
    return payload


def decode_record(row: dict) -> HealthRecord:
    raw_date = row["date"]
    record_date = raw_date if isinstance(raw_date, date) else date.fromisoformat(str(raw_date)[:10])
    record_id = row.get("id")
    return HealthRecord(
        id=str(record_id) if record_id is not None else None,
        date=record_date,
        morning_weight=float(row["morning_weight"]),
        evening_weight=float(row["evening_weight"]),
        bm_count=int(row.get("bm_count") or 0),
        has_bm=bool(row.get("has_bm")),
        notes=row.get("notes"),
    )
