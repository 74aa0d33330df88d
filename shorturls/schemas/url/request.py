from pydantic import BaseModel, Field
from typing import Optional


# Request DTOs
class ShortURLCreateRequest(BaseModel):
    # url stays a plain string so a malformed URL is a 400, not a 422
    url: Optional[str] = None
    validity: Optional[int] = Field(None, gt=0, le=525600 * 10, description="Minutes until expiry")
    shortcode: Optional[str] = None
