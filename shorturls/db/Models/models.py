from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import List, Optional, Tuple

DIRECT_REFERRER = "direct"


@dataclass(frozen=True)
class ClickEvent:
    timestamp: datetime
    referrer: str = DIRECT_REFERRER
    user_agent: Optional[str] = None
    source_address: Optional[str] = None


@dataclass
class LinkRecord:
    short_code: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    # Append-only; insertion order is chronological
    clicks: List[ClickEvent] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def append_click(self, event: ClickEvent) -> int:
        with self._lock:
            self.clicks.append(event)
            return len(self.clicks)

    def click_snapshot(self) -> Tuple[ClickEvent, ...]:
        with self._lock:
            return tuple(self.clicks)
