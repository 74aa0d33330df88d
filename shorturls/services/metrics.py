from typing import Callable
from datetime import datetime

from fastapi import Request

from shorturls.RateLimitHelper import get_client_ip
from shorturls.db.Models.models import DIRECT_REFERRER, ClickEvent


def click_from_request(request: Request, clock: Callable[[], datetime]) -> ClickEvent:
    """Capture the analytics fields of a redirect request."""
    return ClickEvent(
        timestamp=clock(),
        referrer=request.headers.get("referer") or DIRECT_REFERRER,
        user_agent=request.headers.get("user-agent"),
        source_address=get_client_ip(request),
    )
