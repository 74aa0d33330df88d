"""Error taxonomy for the short URL service.

Every caller-facing error derives from :class:`ShortURLError` and knows the HTTP
status and JSON body it maps to, so the API layer can translate them with a
single exception handler.
"""
from typing import Any, Dict, Optional


class ShortURLError(Exception):
    status_code: int = 500
    title: str = "Internal Server Error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.title, **self.context}


class InvalidUrl(ShortURLError):
    status_code = 400
    title = "Invalid URL format"

    def __init__(self, url):
        super().__init__(
            f"Invalid URL: {url}",
            {"details": "Please include a valid absolute URL (scheme and host)"},
        )
        self.url = url


class InvalidShortcode(ShortURLError):
    status_code = 400
    title = "Invalid shortcode"

    def __init__(self, shortcode):
        super().__init__(
            f"Invalid shortcode format: {shortcode}",
            {"details": "Must be 4-10 characters (a-z, A-Z, 0-9, _, -)"},
        )
        self.shortcode = shortcode


class ShortcodeUnavailable(ShortURLError):
    status_code = 409
    title = "Shortcode unavailable"

    def __init__(self, shortcode: str):
        super().__init__(
            f"Shortcode collision: {shortcode}",
            {"suggestion": "Please try a different custom shortcode"},
        )
        self.shortcode = shortcode


class NotFound(ShortURLError):
    status_code = 404
    title = "Link not found"

    def __init__(self, shortcode: str):
        super().__init__(
            f"Unknown shortcode: {shortcode}",
            {"solution": "Please check the URL or create a new short link"},
        )
        self.shortcode = shortcode


class Expired(ShortURLError):
    status_code = 410
    title = "Link expired"

    def __init__(self, shortcode: str, original_url: str):
        super().__init__(
            f"Expired link accessed: {shortcode}",
            {
                "originalUrl": original_url,
                "solution": "Create a new short link for this URL",
            },
        )
        self.shortcode = shortcode
        self.original_url = original_url


class LoggingDeliveryFailed(Exception):
    """Raised inside the collector worker only; never reaches a request."""
