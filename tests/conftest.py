"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport

from config import Config
from web_app import create_app
from friendly_urls.catalog import CatalogItem, InMemoryCatalog, ItemKind
from friendly_urls.database.cache import RedisCache
from friendly_urls.database.json_file import JsonFileMappingStore
from friendly_urls.resolver import ResolutionGateway
from friendly_urls.service import FriendlyUrlService
from friendly_urls.sync_worker import CatalogSyncWorker
from friendly_urls.url_generator import UrlGenerator, UrlSettings
from friendly_urls.common.logging_config import setup_logging


class FakeRedis:
    """Minimal stand-in for a redis.asyncio client."""
    
    def __init__(self):
        self.data = {}
        self.closed = False
    
    async def get(self, key):
        return self.data.get(key)
    
    async def setex(self, key, ttl, value):
        self.data[key] = value
        return True
    
    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0
    
    async def ping(self):
        return True
    
    async def aclose(self):
        self.closed = True


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def data_file(tmp_path) -> str:
    """Path of a fresh JSON mapping file."""
    return str(tmp_path / "friendly-urls.json")


@pytest.fixture
async def store(data_file, logger) -> AsyncGenerator[JsonFileMappingStore, None]:
    """Create test mapping store."""
    store = JsonFileMappingStore(db_config=data_file, logger=logger)
    
    yield store
    
    await store.close()


@pytest.fixture
def sample_items():
    """A small catalog: two libraries, a show with one season and episode, a person and a genre."""
    return [
        CatalogItem(id="lib-movies", kind=ItemKind.FOLDER, name="Movies"),
        CatalogItem(id="m1", kind=ItemKind.MOVIE, name="Inception", production_year=2010, parent_id="lib-movies"),
        CatalogItem(id="m2", kind=ItemKind.MOVIE, name="Amélie", production_year=2001, parent_id="lib-movies"),
        CatalogItem(id="lib-shows", kind=ItemKind.FOLDER, name="Shows"),
        CatalogItem(id="s1", kind=ItemKind.SHOW, name="The Office", production_year=2005, parent_id="lib-shows"),
        CatalogItem(id="se2", kind=ItemKind.SEASON, name="Season 2", season_index=2, parent_id="s1"),
        CatalogItem(
            id="ep3",
            kind=ItemKind.EPISODE,
            name="Office Olympics",
            season_index=2,
            episode_index=3,
            parent_id="se2",
        ),
        CatalogItem(id="lib-people", kind=ItemKind.FOLDER, name="People"),
        CatalogItem(id="p1", kind=ItemKind.PERSON, name="Tom Hanks", parent_id="lib-people"),
        CatalogItem(id="g1", kind=ItemKind.GENRE, name="Science Fiction", parent_id="lib-people"),
    ]


@pytest.fixture
def catalog(sample_items, logger) -> InMemoryCatalog:
    """Create in-memory catalog with the sample items."""
    return InMemoryCatalog(sample_items, logger=logger)


@pytest.fixture
def settings() -> UrlSettings:
    """Default URL policy (base path /web, every kind enabled)."""
    return UrlSettings()


@pytest.fixture
def generator(settings, logger) -> UrlGenerator:
    """Create URL generator."""
    return UrlGenerator(settings=settings, logger=logger)


@pytest.fixture
async def worker(catalog, store, generator, logger) -> AsyncGenerator[CatalogSyncWorker, None]:
    """Create sync worker (not started)."""
    worker = CatalogSyncWorker(
        catalog=catalog,
        store=store,
        generator=generator,
        auto_generate=True,
        logger=logger,
    )
    
    yield worker
    
    await worker.stop()


@pytest.fixture
async def gateway(store, settings, logger) -> ResolutionGateway:
    """Create resolution gateway without a cache."""
    return ResolutionGateway(store=store, settings=settings, cache=None, logger=logger)


@pytest.fixture
async def service(store, catalog, generator, worker, gateway, logger) -> AsyncGenerator[FriendlyUrlService, None]:
    """Create service instance."""
    service = FriendlyUrlService(
        store=store,
        catalog=catalog,
        generator=generator,
        worker=worker,
        gateway=gateway,
        cache=None,  # No cache for tests
        soft_delete=True,
        logger=logger,
    )
    
    yield service
    
    await service.close()


@pytest.fixture
def config(data_file) -> Config:
    """Create test configuration."""
    return Config(
        data_file=data_file,
        base_url="/web",
        public_host="https://media.example.com",
    )


@pytest.fixture
async def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def cache(logger) -> RedisCache:
    """RedisCache backed by an in-memory client."""
    cache = RedisCache(redis_url="redis://localhost:6379/0", ttl_seconds=60, logger=logger)
    cache.client = FakeRedis()
    return cache
