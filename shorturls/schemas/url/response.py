from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


# Response DTOs
class ShortURLCreatedResponse(BaseModel):
    short_link: str = Field(..., alias="shortLink")
    original_url: str = Field(..., alias="originalUrl")
    expiry: datetime
    management_link: str = Field(..., alias="managementLink")

    model_config = {"populate_by_name": True}


class ClickInfo(BaseModel):
    timestamp: datetime
    referrer: str
    user_agent: Optional[str] = Field(None, alias="userAgent")

    model_config = {"populate_by_name": True}


class ShortURLStatsResponse(BaseModel):
    original_url: str = Field(..., alias="originalUrl")
    short_link: str = Field(..., alias="shortLink")
    created_at: datetime = Field(..., alias="createdAt")
    expiry: datetime
    total_clicks: int = Field(..., alias="totalClicks")
    clicks: List[ClickInfo]

    model_config = {"populate_by_name": True}
