"""Magic-link renewal and short-link redirect routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from immersion.domain.link.command.renew_magic_link import (
    MagicLinkRenewed,
    RenewConventionMagicLink,
    RenewConventionMagicLinkHandler,
)
from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.link.query.resolve_short_link import (
    ResolveShortLink,
    ResolveShortLinkHandler,
)

router = APIRouter(tags=["Links"], route_class=DishkaRoute)


@router.post("/magic-links/renew", response_model=MagicLinkRenewed)
async def renew_magic_link(
    body: RenewConventionMagicLink,
    handler: FromDishka[RenewConventionMagicLinkHandler],
) -> MagicLinkRenewed:
    return await handler.run(body)


@router.get("/to/{short_link_id}")
async def follow_short_link(
    short_link_id: ShortLinkId,
    handler: FromDishka[ResolveShortLinkHandler],
) -> RedirectResponse:
    result = await handler.run(ResolveShortLink(short_link_id=short_link_id))
    return RedirectResponse(result.url, status_code=302)
