"""Tests for friendly URL resolution."""

from unittest.mock import AsyncMock

import pytest

from friendly_urls.catalog import CatalogItem, ItemKind
from friendly_urls.database.json_file import JsonFileMappingStore
from friendly_urls.errors import StorageError
from friendly_urls.resolver import Miss, RedirectTarget, ResolutionGateway
from friendly_urls.url_generator import UrlSettings


@pytest.fixture
async def inception(store, generator):
    """Insert the mapping for Inception (2010)."""
    item = CatalogItem(id="m1", kind=ItemKind.MOVIE, name="Inception", production_year=2010)
    mapping = generator.build_mapping(item)
    await store.insert(mapping)
    return mapping


class DeactivatingStore(JsonFileMappingStore):
    """JSON store where an admin deactivates each mapping right after it is looked up."""
    
    async def find_by_friendly_url(self, friendly_url):
        found = await super().find_by_friendly_url(friendly_url)
        if found is not None:
            await self.deactivate(found.id)
        return found


class TestClassification:
    """Test friendly URL detection."""
    
    @pytest.mark.parametrize(
        "path",
        [
            "/web/movie/inception-2010",
            "/WEB/Movie/Inception-2010",
            "/web/show/the-office/season-2/episode-3",
            "/web/person/tom-hanks",
            "/web/collection/x",
            "/web/genre/drama",
            "/web/studio/pixar",
        ],
    )
    def test_friendly(self, gateway, path):
        assert gateway.is_friendly_url(path)
    
    @pytest.mark.parametrize(
        "path",
        [
            None,
            "",
            "/",
            "/unknown/path",
            "/web/index.html",
            "/web/movie",
            "/web/episode/x",
            "/movie/inception-2010",
            "/api/health",
        ],
    )
    def test_not_friendly(self, gateway, path):
        assert not gateway.is_friendly_url(path)
    
    def test_empty_base_path(self, store):
        """Test friendly URLs directly under the root."""
        gateway = ResolutionGateway(store=store, settings=UrlSettings(base_url=""))
        
        assert gateway.is_friendly_url("/movie/inception-2010")
        assert not gateway.is_friendly_url("/web/movie/inception-2010")


class TestResolve:
    """Test resolution against the store."""
    
    @pytest.mark.asyncio
    async def test_round_trip(self, gateway, store, inception):
        """Test resolving returns the original URL and records one access."""
        result = await gateway.resolve("/web/movie/inception-2010")
        
        assert isinstance(result, RedirectTarget)
        assert result.url == inception.original_url
        assert result.status_code == 301
        
        stored = await store.get(inception.id)
        assert stored.access_count == 1
        assert stored.last_accessed is not None
    
    @pytest.mark.asyncio
    async def test_counts_every_access(self, gateway, store, inception):
        """Test access_count increments by one per resolution."""
        for _ in range(3):
            await gateway.resolve("/web/movie/inception-2010")
        
        assert (await store.get(inception.id)).access_count == 3
    
    @pytest.mark.asyncio
    async def test_case_insensitive(self, gateway, inception):
        """Test resolution ignores case and a trailing slash."""
        result = await gateway.resolve("/Web/MOVIE/Inception-2010/")
        
        assert isinstance(result, RedirectTarget)
        assert result.url == inception.original_url
    
    @pytest.mark.asyncio
    async def test_not_friendly_skips_store(self):
        """Test non-friendly paths never reach the store."""
        store = AsyncMock()
        gateway = ResolutionGateway(store=store)
        
        result = await gateway.resolve("/unknown/path")
        
        assert isinstance(result, Miss)
        assert result.reason == "not_friendly"
        store.find_by_friendly_url.assert_not_called()
        store.record_access.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_unknown_slug(self, gateway, inception):
        """Test a friendly-shaped path without a mapping."""
        result = await gateway.resolve("/web/movie/no-such-movie")
        
        assert isinstance(result, Miss)
        assert result.reason == "not_found"
    
    @pytest.mark.asyncio
    async def test_inactive_mapping(self, gateway, store, inception):
        """Test deactivated mappings do not resolve."""
        await store.deactivate(inception.id)
        
        result = await gateway.resolve("/web/movie/inception-2010")
        
        assert isinstance(result, Miss)
    
    @pytest.mark.asyncio
    async def test_storage_error(self):
        """Test an unreachable store yields a miss."""
        store = AsyncMock()
        store.find_by_friendly_url.side_effect = StorageError("store offline")
        gateway = ResolutionGateway(store=store)
        
        result = await gateway.resolve("/web/movie/inception-2010")
        
        assert isinstance(result, Miss)
        assert result.reason == "storage_error"
    
    @pytest.mark.asyncio
    async def test_stat_update_failure_still_redirects(self, inception):
        """Test a failed statistics write does not block the redirect."""
        store = AsyncMock()
        store.find_by_friendly_url.return_value = inception
        store.record_access.side_effect = StorageError("read-only")
        gateway = ResolutionGateway(store=store)
        
        result = await gateway.resolve("/web/movie/inception-2010")
        
        assert isinstance(result, RedirectTarget)
        assert result.url == inception.original_url
    
    @pytest.mark.asyncio
    async def test_deactivated_between_lookup_and_access(self, gateway, store, inception):
        """Test recording an access does not reactivate a mapping deleted meanwhile."""
        found = await store.find_by_friendly_url("/web/movie/inception-2010")
        await store.deactivate(found.id)
        
        assert await gateway._record_access(found) is None
        
        stored = await store.get(inception.id)
        assert not stored.is_active
        assert stored.access_count == 0
    
    @pytest.mark.asyncio
    async def test_deactivated_during_resolution(self, data_file, settings, logger, inception):
        """Test a request racing a soft delete redirects once and leaves the mapping deleted."""
        racing = DeactivatingStore(db_config=data_file, logger=logger)
        gateway = ResolutionGateway(store=racing, settings=settings, logger=logger)
        
        result = await gateway.resolve("/web/movie/inception-2010")
        
        assert isinstance(result, RedirectTarget)
        assert result.url == inception.original_url
        stored = await racing.get(inception.id)
        assert not stored.is_active
        assert isinstance(await gateway.resolve("/web/movie/inception-2010"), Miss)
    
    @pytest.mark.asyncio
    async def test_resolve_slug(self, gateway, store, generator):
        """Test resolving without the base path."""
        item = CatalogItem(
            id="ep3",
            kind=ItemKind.EPISODE,
            series_name="The Office",
            season_index=2,
            episode_index=3,
        )
        mapping = generator.build_mapping(item)
        await store.insert(mapping)
        
        result = await gateway.resolve_slug("show", "the-office", "season-2", "episode-3")
        
        assert isinstance(result, RedirectTarget)
        assert result.url == mapping.original_url


class TestCachedResolve:
    """Test resolution with the Redis cache."""
    
    @pytest.mark.asyncio
    async def test_cache_fill_and_hit(self, store, settings, cache, inception, logger):
        """Test the second resolution is served from the cache and still counted."""
        gateway = ResolutionGateway(store=store, settings=settings, cache=cache, logger=logger)
        
        first = await gateway.resolve("/web/movie/inception-2010")
        assert cache.client.data[cache.get_cache_key("/web/movie/inception-2010")] == inception.original_url
        
        second = await gateway.resolve("/WEB/movie/inception-2010")
        await gateway.drain()
        
        assert first.url == second.url == inception.original_url
        assert (await store.get(inception.id)).access_count == 2
    
    @pytest.mark.asyncio
    async def test_invalidate(self, store, settings, cache, inception, logger):
        """Test invalidation drops the cached entry."""
        gateway = ResolutionGateway(store=store, settings=settings, cache=cache, logger=logger)
        await gateway.resolve("/web/movie/inception-2010")
        
        await gateway.invalidate("/web/movie/Inception-2010")
        
        assert cache.client.data == {}
    
    @pytest.mark.asyncio
    async def test_stale_cache_entry(self, store, settings, cache, inception, logger):
        """Test a cached URL whose mapping was removed is evicted."""
        gateway = ResolutionGateway(store=store, settings=settings, cache=cache, logger=logger)
        await gateway.resolve("/web/movie/inception-2010")
        await store.delete(inception.id)
        
        await gateway.resolve("/web/movie/inception-2010")
        await gateway.drain()
        
        assert cache.client.data == {}
    
    @pytest.mark.asyncio
    async def test_cached_hit_after_deactivation(self, store, settings, cache, inception, logger):
        """Test a cache hit on a deactivated mapping evicts it and keeps it inactive."""
        gateway = ResolutionGateway(store=store, settings=settings, cache=cache, logger=logger)
        await gateway.resolve("/web/movie/inception-2010")
        await store.deactivate(inception.id)
        
        await gateway.resolve("/web/movie/inception-2010")
        await gateway.drain()
        
        stored = await store.get(inception.id)
        assert not stored.is_active
        assert stored.access_count == 1
        assert cache.client.data == {}
