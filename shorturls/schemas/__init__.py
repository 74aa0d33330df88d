# re-export common schemas for simpler imports
from .url.request import ShortURLCreateRequest
from .url.response import ClickInfo, ShortURLCreatedResponse, ShortURLStatsResponse

__all__ = [
    "ShortURLCreateRequest",
    "ShortURLCreatedResponse",
    "ShortURLStatsResponse",
    "ClickInfo",
]
