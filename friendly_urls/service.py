"""Administrative service layer for friendly URLs."""

import logging
from typing import Optional, Dict, Any, List

from .catalog import CatalogSource
from .database.base import MappingStoreBase
from .database.cache import RedisCache
from .database.models import FriendlyUrlMapping
from .resolver import ResolutionGateway
from .sync_worker import CatalogSyncWorker, GenerationResult, GenerationStatus, ScanResult
from .url_generator import UrlGenerator


class FriendlyUrlService:
    """Service layer used by the HTTP API and the CLI."""
    
    def __init__(
        self,
        store: MappingStoreBase,
        catalog: CatalogSource,
        generator: UrlGenerator,
        worker: CatalogSyncWorker,
        gateway: ResolutionGateway,
        cache: Optional[RedisCache] = None,
        soft_delete: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize friendly URL service.
        
        Args:
            store: Mapping store
            catalog: Catalog source
            generator: URL generator
            worker: Catalog sync worker
            gateway: Resolution gateway
            cache: Optional cache instance
            soft_delete: Deactivate instead of removing on delete
            logger: Optional logger
        """
        self.store = store
        self.catalog = catalog
        self.generator = generator
        self.worker = worker
        self.gateway = gateway
        self.cache = cache
        self.soft_delete = soft_delete
        self.logger = logger or logging.getLogger(__name__)
    
    async def generate_for_item(self, item_id: str) -> GenerationResult:
        """Generate a friendly URL for one catalog item on demand.
        
        Args:
            item_id: Catalog item identifier
            
        Returns:
            Generation result. An existing mapping is returned as EXISTS.
            
        Raises:
            StorageError: If the store cannot be reached
        """
        self.logger.info(f"Generating URL for item: {item_id}")
        
        item = await self.catalog.get_item(item_id)
        if item is None:
            self.logger.warning(f"Item not found: {item_id}")
            return GenerationResult(GenerationStatus.NOT_FOUND, item_id)
        
        result = await self.worker.ensure_mapping(item)
        
        if result.status == GenerationStatus.UNSUPPORTED:
            self.logger.warning(f"Cannot generate URL for item kind: {item.kind.value}")
        elif result.status == GenerationStatus.EXISTS:
            self.logger.info(f"Existing mapping found for item: {item_id}")
        elif result.status == GenerationStatus.CREATED:
            self.logger.info(f"Generated friendly URL: {result.friendly_url} for item: {item_id}")
        
        return result
    
    async def generate_all(self) -> ScanResult:
        """Generate friendly URLs for the whole catalog.
        
        Raises:
            ScanInProgressError: If a scan is already running
        """
        return await self.worker.run_full_scan()
    
    async def list_mappings(self) -> List[FriendlyUrlMapping]:
        """List all mappings, including inactive ones."""
        return await self.store.list_all()
    
    async def get_mapping(self, mapping_id: str) -> Optional[FriendlyUrlMapping]:
        return await self.store.get(mapping_id)
    
    async def get_mapping_for_item(self, item_id: str) -> Optional[FriendlyUrlMapping]:
        return await self.store.find_by_item_id(item_id)
    
    async def delete_mapping(self, mapping_id: str) -> bool:
        """Delete or deactivate a mapping.
        
        Args:
            mapping_id: Mapping id
            
        Returns:
            True if a mapping was affected
        """
        mapping = await self.store.get(mapping_id)
        if mapping is None:
            return False
        
        if self.soft_delete:
            success = await self.store.deactivate(mapping_id)
        else:
            success = await self.store.delete(mapping_id)
        
        await self.gateway.invalidate(mapping.friendly_url)
        
        if success:
            action = "Deactivated" if self.soft_delete else "Deleted"
            self.logger.info(f"{action} friendly URL: {mapping.friendly_url}")
        return success
    
    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics.
        
        Returns:
            Dictionary with statistics
        """
        db_stats = await self.store.get_statistics()
        last_scan = self.worker.last_scan
        
        return {
            **db_stats,
            "cache_enabled": self.cache is not None and self.cache.enabled,
            "auto_generate": self.worker.auto_generate,
            "worker_state": self.worker.state.value,
            "last_scan": last_scan.to_dict() if last_scan else None,
        }
    
    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.
        
        Returns:
            Dictionary with health status
        """
        db_healthy = await self.store.health_check()
        
        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()
        
        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }
    
    async def close(self) -> None:
        """Stop background work and close connections."""
        await self.worker.stop()
        await self.gateway.drain()
        await self.store.close()
        if self.cache:
            await self.cache.close()
