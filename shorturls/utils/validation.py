import ipaddress
import re
from urllib.parse import urlsplit

SHORTCODE_PATTERN = re.compile(r"[a-zA-Z0-9_-]{4,10}")
# One DNS label; \w admits internationalized letters, nothing else beyond "-"
HOST_LABEL_PATTERN = re.compile(r"[\w-]+")


def _valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    labels = host[:-1].split(".") if host.endswith(".") else host.split(".")
    return all(HOST_LABEL_PATTERN.fullmatch(label) for label in labels)


def validate_url(candidate) -> bool:
    """True when ``candidate`` is an absolute URL with a scheme and a well-formed host."""
    if not isinstance(candidate, str) or not candidate:
        return False
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme) and bool(host) and _valid_host(host)


def validate_shortcode(candidate) -> bool:
    if not isinstance(candidate, str):
        return False
    return SHORTCODE_PATTERN.fullmatch(candidate) is not None
