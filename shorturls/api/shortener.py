from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
import logging

from shorturls.core.config import Settings
from shorturls.schemas import (
    ClickInfo,
    ShortURLCreateRequest,
    ShortURLCreatedResponse,
    ShortURLStatsResponse,
)
from shorturls.services import metrics
from shorturls.services.shortener import LinkService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_link_service(request: Request) -> LinkService:
    return request.app.state.link_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def public_base(request: Request, settings: Settings) -> str:
    base = settings.BASE_URL or str(request.base_url)
    return base.rstrip("/")


@router.post(
    "/shorturls",
    response_model=ShortURLCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["shorturls"],
)
def create_short_url_endpoint(
    body: ShortURLCreateRequest,
    request: Request,
    service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings),
):
    validity = body.validity if body.validity is not None else settings.DEFAULT_VALIDITY_MINUTES
    record = service.create(body.url, validity, body.shortcode)

    base = public_base(request, settings)
    return ShortURLCreatedResponse(
        short_link=f"{base}/{record.short_code}",
        original_url=record.original_url,
        expiry=record.expires_at,
        management_link=f"{base}/shorturls/{record.short_code}",
    )


@router.get("/shorturls/{short_code}", response_model=ShortURLStatsResponse, tags=["shorturls"])
def get_short_url_stats_endpoint(
    short_code: str,
    request: Request,
    service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings),
):
    link_stats = service.stats(short_code)
    return ShortURLStatsResponse(
        original_url=link_stats.original_url,
        short_link=f"{public_base(request, settings)}/{link_stats.short_code}",
        created_at=link_stats.created_at,
        expiry=link_stats.expires_at,
        total_clicks=link_stats.total_clicks,
        clicks=[
            ClickInfo(timestamp=c.timestamp, referrer=c.referrer, user_agent=c.user_agent)
            for c in link_stats.clicks
        ],
    )


@router.get("/{short_code}", tags=["redirect"])
def redirect_to_url_endpoint(
    short_code: str,
    request: Request,
    service: LinkService = Depends(get_link_service),
):
    click = metrics.click_from_request(request, service.now)
    target = service.redirect(short_code, click)
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
