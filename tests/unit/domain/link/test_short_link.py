"""Unit tests for ShortLinkService and the short id generator."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from immersion.config import Config, Server, ShortLinkConfig
from immersion.domain.auth.model.role import Role
from immersion.domain.link.model.short_link import ShortLink
from immersion.domain.link.model.value import FrontRoute, LinkLifetime, ShortLinkId
from immersion.domain.link.service.short_link import ShortLinkService
from immersion.domain.shared.error import NotFoundError
from immersion.infrastructure.system.short_link_id import RandomShortLinkIdGenerator

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)
LONG_URL = "https://front.example.fr/verifier-et-signer?jwt=abc"


def _make_service(repo: AsyncMock | None = None) -> tuple[ShortLinkService, AsyncMock, MagicMock]:
    repo = repo or AsyncMock()
    id_generator = MagicMock()
    id_generator.generate.return_value = ShortLinkId("AbC123xyz0")
    magic_links = MagicMock()
    magic_links.make_convention_magic_link.return_value = LONG_URL
    config = Config(
        server=Server(api_url="https://api.example.fr/api/v1/"),
        short_link=ShortLinkConfig(route="to"),
    )
    service = ShortLinkService(
        _repo=repo, _id_generator=id_generator, _magic_links=magic_links, _config=config
    )
    return service, repo, magic_links


class TestShorten:
    @pytest.mark.asyncio
    async def test_stores_the_long_url_under_a_fresh_id(self):
        service, repo, _ = _make_service()

        short_url = await service.shorten(LONG_URL, NOW)

        assert short_url == "https://api.example.fr/api/v1/to/AbC123xyz0"
        repo.save.assert_called_once_with(
            ShortLink(id=ShortLinkId("AbC123xyz0"), url=LONG_URL, created_at=NOW)
        )

    @pytest.mark.asyncio
    async def test_magic_short_link_wraps_a_magic_link(self):
        service, repo, magic_links = _make_service()

        short_url = await service.make_magic_short_link(
            convention_id="conv-1",
            role=Role.ESTABLISHMENT_TUTOR,
            email="tutor@company.fr",
            now=NOW,
            target_route=FrontRoute.ASSESSMENT,
        )

        assert short_url.endswith("/to/AbC123xyz0")
        assert magic_links.make_convention_magic_link.call_args.kwargs["lifetime"] == (
            LinkLifetime.SHORT
        )
        assert repo.save.call_args.args[0].url == LONG_URL


class TestResolve:
    @pytest.mark.asyncio
    async def test_returns_the_long_url(self):
        repo = AsyncMock()
        repo.get.return_value = ShortLink(id=ShortLinkId("abc"), url=LONG_URL, created_at=NOW)
        service, _, _ = _make_service(repo)

        assert await service.resolve(ShortLinkId("abc"), NOW) == LONG_URL
        repo.mark_used.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_id(self):
        repo = AsyncMock()
        repo.get.return_value = None
        service, _, _ = _make_service(repo)

        with pytest.raises(NotFoundError) as exc_info:
            await service.resolve(ShortLinkId("nope"), NOW)

        assert exc_info.value.code == "short_link_not_found"

    @pytest.mark.asyncio
    async def test_single_use_link_is_consumed(self):
        repo = AsyncMock()
        repo.get.return_value = ShortLink(
            id=ShortLinkId("abc"), url=LONG_URL, single_use=True, created_at=NOW
        )
        repo.mark_used.return_value = True
        service, _, _ = _make_service(repo)

        assert await service.resolve(ShortLinkId("abc"), NOW) == LONG_URL
        repo.mark_used.assert_called_once_with(ShortLinkId("abc"), NOW)

    @pytest.mark.asyncio
    async def test_single_use_link_already_consumed(self):
        repo = AsyncMock()
        repo.get.return_value = ShortLink(
            id=ShortLinkId("abc"), url=LONG_URL, single_use=True, created_at=NOW
        )
        repo.mark_used.return_value = False
        service, _, _ = _make_service(repo)

        with pytest.raises(NotFoundError) as exc_info:
            await service.resolve(ShortLinkId("abc"), NOW)

        assert exc_info.value.code == "short_link_already_used"


class TestRandomShortLinkIdGenerator:
    def test_ids_are_alphanumeric_with_configured_length(self):
        generator = RandomShortLinkIdGenerator(length=12)

        ids = {generator.generate() for _ in range(50)}

        assert len(ids) == 50
        assert all(len(i) == 12 and i.isalnum() and i.isascii() for i in ids)
