import json
from typing import List

from models import HealthRecord

PROMPT_DAYS = 7

PROMPT_TEMPLATE = """
作为健康顾问，请分析以下用户过去一周的体重和排便记录，给出简短、积极且专业的建议。
关注：早晚体重波动是否过大（理想在1-2斤内）、排便频率、以及体重的长期趋势。
数据：{data}
语言：中文
输出格式：直接输出建议文本，分段清晰。
"""


def prompt_entry(record: HealthRecord) -> dict:
    return {
        "date": record.date.isoformat(),
        "morning": record.morning_weight,
        "evening": record.evening_weight,
        "bm": f"Yes ({record.bm_count} times)" if record.has_bm else "No",
        "notes": record.notes or "",
    }


def build_prompt(records: List[HealthRecord]) -> str:
    """Prompt over the most recent PROMPT_DAYS records, newest first as held."""
    data = [prompt_entry(r) for r in records[:PROMPT_DAYS]]
    return PROMPT_TEMPLATE.format(data=json.dumps(data, ensure_ascii=False)).strip()
