"""CSV export of the record list.

The file opens cleanly in spreadsheet tools: UTF-8 with a BOM, notes always
quoted, embedded quotes doubled.
"""

from datetime import date
from typing import List, Optional

from models import HealthRecord

HEADERS = ["日期", "早起体重(斤)", "晚间体重(斤)", "排便次数", "是否排便", "备注"]
BOM = "\ufeff"
EMPTY_EXPORT_MESSAGE = "暂无数据可供导出"


def format_number(value) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def quote(text: Optional[str]) -> str:
    return '"' + (text or "").replace('"', '""') + '"'


def encode_row(record: HealthRecord) -> str:
    return ",".join([
        record.date.isoformat(),
        format_number(record.morning_weight),
        format_number(record.evening_weight),
        str(record.bm_count),
        "是" if record.has_bm else "否",
        quote(record.notes),
    ])


def encode_csv(records: List[HealthRecord]) -> Optional[str]:
    """Header plus one row per record, or None when there is nothing to export."""
    if not records:
        return None
    lines = [",".join(HEADERS)]
    lines.extend(encode_row(r) for r in records)
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"fitlog_records_{today.isoformat()}.csv"


def export_bytes(records: List[HealthRecord]) -> Optional[bytes]:
    content = encode_csv(records)
    if content is None:
        return None
    return (BOM + content).encode("utf-8")
