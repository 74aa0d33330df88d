from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
import logging

from shorturls.core.errors import (
    Expired,
    InvalidShortcode,
    InvalidUrl,
    NotFound,
    ShortcodeUnavailable,
)
from shorturls.db.Models.models import ClickEvent, LinkRecord
from shorturls.db.repository import LinkStore
from shorturls.utils.encoding import SHORT_CODE_LENGTH, generate_short_code
from shorturls.utils.validation import validate_shortcode, validate_url

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_MINUTES = 30
MAX_GENERATION_ATTEMPTS = 5


@dataclass(frozen=True)
class LinkStats:
    short_code: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    total_clicks: int
    clicks: Tuple[ClickEvent, ...]


class LinkService:

    def __init__(
        self,
        store: LinkStore,
        code_length: int = SHORT_CODE_LENGTH,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
        generator=generate_short_code,
    ):
        self.store = store
        self.code_length = code_length
        self.max_attempts = max(1, max_attempts)
        self.generator = generator

    def now(self) -> datetime:
        return self.store.clock()

    def create(
        self,
        original_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        short_code: Optional[str] = None,
    ) -> LinkRecord:
        if not validate_url(original_url):
            logger.error("Invalid URL: %s", original_url, extra={"package": "service"})
            raise InvalidUrl(original_url)

        if short_code:
            if not validate_shortcode(short_code):
                logger.error(
                    "Invalid shortcode format: %s", short_code, extra={"package": "service"}
                )
                raise InvalidShortcode(short_code)
            record = self.store.create(short_code, original_url, validity_minutes)
        else:
            record = self._create_with_generated_code(original_url, validity_minutes)

        logger.info("Created short URL: %s", record.short_code, extra={"package": "service"})
        return record

    def _create_with_generated_code(self, original_url: str, validity_minutes: int) -> LinkRecord:
        for attempt in range(self.max_attempts):
            candidate = self.generator(self.code_length)
            try:
                return self.store.create(candidate, original_url, validity_minutes)
            except ShortcodeUnavailable:
                logger.info(
                    f"Short code collision on attempt {attempt + 1}/{self.max_attempts}",
                    extra={"package": "service"},
                )
        raise ShortcodeUnavailable(candidate)

    def redirect(self, short_code: str, click: ClickEvent) -> str:
        """Resolve ``short_code`` and record ``click``; returns the target URL."""
        entry = self.store.get(short_code)
        if entry is None:
            logger.warning(
                "Invalid shortcode access: %s", short_code, extra={"package": "service"}
            )
            raise NotFound(short_code)

        if entry.is_expired(self.now()):
            logger.warning(
                "Expired link accessed: %s", short_code, extra={"package": "service"}
            )
            raise Expired(short_code, entry.original_url)

        self.store.record_click(short_code, click)
        logger.debug(
            "Redirecting: %s -> %s", short_code, entry.original_url, extra={"package": "service"}
        )
        return entry.original_url

    def stats(self, short_code: str) -> LinkStats:
        entry = self.store.get(short_code)
        if entry is None:
            logger.error(
                "Stats requested for unknown shortcode: %s", short_code, extra={"package": "service"}
            )
            raise NotFound(short_code)

        clicks = entry.click_snapshot()
        logger.info("Providing stats for %s", short_code, extra={"package": "service"})
        return LinkStats(
            short_code=entry.short_code,
            original_url=entry.original_url,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            total_clicks=len(clicks),
            clicks=clicks,
        )
