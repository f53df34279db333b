"""Wiring of the friendly URL components."""

import logging
from typing import Optional

from .catalog import CatalogSource, InMemoryCatalog
from .common.logging_config import get_logger
from .database import create_mapping_store
from .database.cache import RedisCache
from .resolver import ResolutionGateway
from .service import FriendlyUrlService
from .sync_worker import CatalogSyncWorker
from .url_generator import UrlGenerator


async def build_service(
    config,
    logger: Optional[logging.Logger] = None,
    catalog: Optional[CatalogSource] = None,
) -> FriendlyUrlService:
    """Construct every component from a Config.
    
    The background worker is not started; callers own its lifecycle.
    
    Args:
        config: Application configuration
        logger: Optional logger
        catalog: Catalog source (defaults to config.catalog_file or an empty catalog)
        
    Returns:
        Wired service
    """
    logger = logger or get_logger()
    settings = config.url_settings()
    
    store = create_mapping_store(
        backend=config.store_backend,
        data_file=config.data_file,
        postgres_url=config.postgres_url,
        logger=logger,
    )
    logger.info(f"Using {store.backend_name} mapping store")
    
    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")
    
    if catalog is None:
        if config.catalog_file:
            catalog = InMemoryCatalog.from_json_file(config.catalog_file, logger=logger)
        else:
            logger.warning("No catalog file configured, starting with an empty catalog")
            catalog = InMemoryCatalog(logger=logger)
    
    generator = UrlGenerator(settings=settings, logger=logger)
    worker = CatalogSyncWorker(
        catalog=catalog,
        store=store,
        generator=generator,
        auto_generate=settings.auto_generate,
        logger=logger,
    )
    gateway = ResolutionGateway(store=store, settings=settings, cache=cache, logger=logger)
    
    return FriendlyUrlService(
        store=store,
        catalog=catalog,
        generator=generator,
        worker=worker,
        gateway=gateway,
        cache=cache,
        soft_delete=config.soft_delete,
        logger=logger,
    )
