import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .health_record import HealthRecord


@dataclass
class SessionContext:
    """Everything a logged-in user's requests share.

    Created on login, torn down on logout. The record cache is only replaced
    after the store confirms a change.
    """
    user_id: Optional[str]
    username: str
    client: Any = None
    records: List[HealthRecord] = field(default_factory=list)
    records_loaded: bool = False
    insight: Optional[str] = None
    insight_pending: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    def set_records(self, records: List[HealthRecord]) -> None:
        self.records = list(records)
        self.records_loaded = True

    def reconcile(self, apply, result) -> List[HealthRecord]:
        """Apply one confirmed store result to the cache as a single read-modify-write."""
        with self._lock:
            self.records = apply(self.records, result)
            self.records_loaded = True
            return self.records

    def begin_insight(self) -> bool:
        """Claim the single insight slot. False when one is already in flight."""
        with self._lock:
            if self.insight_pending:
                return False
            self.insight_pending = True
            return True

    def finish_insight(self, text: Optional[str] = None) -> None:
        with self._lock:
            if text is not None:
                self.insight = text
            self.insight_pending = False

    def reset_insight(self) -> None:
        with self._lock:
            self.insight = None

    def teardown(self) -> None:
        self.records = []
        self.records_loaded = False
        self.insight = None
        self.insight_pending = False
        self.client = None
        self.user_id = None


class SessionRegistry:
    """Server-side store of SessionContext objects keyed by an opaque token."""

    def __init__(self):
        self._sessions: Dict[str, SessionContext] = {}
        self._lock = threading.Lock()

    def open(self, ctx: SessionContext) -> str:
        token = uuid.uuid4().hex
        with self._lock:
            self._sessions[token] = ctx
        return token

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def close(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        with self._lock:
            ctx = self._sessions.pop(token, None)
        if ctx is not None:
            ctx.teardown()
        return ctx
