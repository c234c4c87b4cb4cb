from .completion import complete_with_groq, complete_with_openai, get_completer
from .prompt import build_prompt
from .requester import FALLBACK_MESSAGE, MIN_RECORDS, request_insight

__all__ = [
    "FALLBACK_MESSAGE",
    "MIN_RECORDS",
    "build_prompt",
    "complete_with_groq",
    "complete_with_openai",
    "get_completer",
    "request_insight",
]
