import math
from datetime import date
from typing import Optional

from exceptions import ValidationError
from models import HealthRecord

TRUTHY = {"1", "true", "yes", "y", "on", "是"}


def to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def to_weight(value) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError):
        raise ValidationError("请输入有效的体重数据", field="weight")
    if not math.isfinite(weight) or weight <= 0:
        raise ValidationError("请输入有效的体重数据", field="weight")
    return weight


def to_date(value) -> date:
    if value in (None, ""):
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError("日期格式无效，请使用 YYYY-MM-DD", field="date")


def to_count(value) -> int:
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("排便次数必须是整数", field="bmCount")


def to_notes(value) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("备注必须是文本", field="notes")
    return value.strip() or None


def parse_record_form(data, record_id: Optional[str] = None) -> HealthRecord:
    """Turn a submitted record form (JSON body or form fields) into a HealthRecord.

    A day with a bowel movement counts at least once; a day without one counts zero.
    """
    has_bm = to_bool(data.get("hasBM"))
    count = to_count(data.get("bmCount"))
    return HealthRecord(
        id=record_id,
        date=to_date(data.get("date")),
        morning_weight=to_weight(data.get("morningWeight")),
        evening_weight=to_weight(data.get("eveningWeight")),
        has_bm=has_bm,
        bm_count=max(count, 1) if has_bm else 0,
        notes=to_notes(data.get("notes")),
    )
