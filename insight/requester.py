import logging
from typing import List

from exceptions import ValidationError
from models import HealthRecord

from .completion import Completer
from .prompt import build_prompt

logger = logging.getLogger(__name__)

MIN_RECORDS = 3
NOT_ENOUGH_DATA_MESSAGE = "请至少记录3天的数据后再使用AI分析。"
FALLBACK_MESSAGE = "生成建议时出错了，请稍后再试。"
EMPTY_RESPONSE_MESSAGE = "暂时无法生成建议。"


def request_insight(records: List[HealthRecord], complete: Completer) -> str:
    """Ask the completion service for advice on the recent records.

    Refuses locally (ValidationError) with fewer than MIN_RECORDS records.
    Service failures never propagate: they come back as FALLBACK_MESSAGE.
    """
    if len(records) < MIN_RECORDS:
        raise ValidationError(NOT_ENOUGH_DATA_MESSAGE, field="records")

    prompt = build_prompt(records)
    try:
        text = complete(prompt)
    except Exception as e:
        logger.error("Insight generation failed: %s", e)
        return FALLBACK_MESSAGE
    return text or EMPTY_RESPONSE_MESSAGE
