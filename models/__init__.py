from .health_record import HealthRecord, decode_record, encode_record
from .session_context import SessionContext, SessionRegistry

__all__ = [
    "HealthRecord",
    "SessionContext",
    "SessionRegistry",
    "decode_record",
    "encode_record",
]
