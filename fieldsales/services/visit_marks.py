"""
"Visited today" marks.

A convenience annotation a salesperson can toggle on the daily agenda, keyed by
(user, date, client). It is non-authoritative: it lives only in Redis with a TTL,
is never read by the visit lifecycle, and never changes a Visit.
"""

import logging
from datetime import date

from .. import config
from ..cache import Cache, cache

logger = logging.getLogger(__name__)


class VisitMarks:
    def __init__(self, store: Cache = cache, ttl_seconds: int = config.VISIT_MARK_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(user_id: str, day: date) -> str:
        return f"visit_marks:{user_id}:{day.isoformat()}"

    def mark(self, user_id: str, day: date, client_id: int) -> bool:
        stored = self.store.add_member(self._key(user_id, day), str(client_id), self.ttl_seconds)
        if not stored:
            logger.warning(f"Visit mark not stored for user {user_id} on {day} (cache unavailable)")
        return stored

    def unmark(self, user_id: str, day: date, client_id: int) -> bool:
        return self.store.remove_member(self._key(user_id, day), str(client_id))

    def list_marks(self, user_id: str, day: date) -> list[int]:
        return sorted(int(member) for member in self.store.members(self._key(user_id, day)))
