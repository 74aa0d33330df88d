from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, Optional
import logging

from shorturls.core.errors import NotFound, ShortcodeUnavailable
from shorturls.db.Models.models import ClickEvent, LinkRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkStore:
    """Process-lifetime mapping of short code -> :class:`LinkRecord`.

    Reads are plain dict lookups and never take a lock. Inserts and purges are
    serialized by the store lock, which makes check-and-insert atomic per key.
    Click appends only lock the record they touch.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock or utcnow
        self._links: Dict[str, LinkRecord] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, short_code: str) -> bool:
        return short_code in self._links

    def create(self, short_code: str, original_url: str, validity_minutes: int) -> LinkRecord:
        if validity_minutes <= 0:
            raise ValueError("validity_minutes must be positive")

        with self._lock:
            if short_code in self._links:
                logger.warning(
                    "Shortcode collision: %s", short_code, extra={"package": "repository"}
                )
                raise ShortcodeUnavailable(short_code)

            now = self.clock()
            record = LinkRecord(
                short_code=short_code,
                original_url=original_url,
                created_at=now,
                expires_at=now + timedelta(minutes=validity_minutes),
            )
            self._links[short_code] = record
        return record

    def get(self, short_code: str) -> Optional[LinkRecord]:
        return self._links.get(short_code)

    def record_click(self, short_code: str, event: ClickEvent) -> int:
        record = self._links.get(short_code)
        if record is None:
            raise NotFound(short_code)
        return record.append_click(event)

    def purge_expired(self, older_than: datetime) -> int:
        """Drop records whose expiry is before ``older_than``; returns how many."""
        with self._lock:
            stale = [code for code, rec in self._links.items() if rec.expires_at < older_than]
            for code in stale:
                del self._links[code]
        if stale:
            logger.info(
                "Purged %d expired link(s)", len(stale), extra={"package": "repository"}
            )
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._links.clear()
