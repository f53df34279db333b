"""Request-time resolution of friendly URLs."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Set, Union

from .database.base import MappingStoreBase
from .database.cache import RedisCache
from .database.models import FriendlyUrlMapping, normalize_friendly_url, utcnow
from .url_generator import URL_PREFIXES, UrlSettings
from .common.url_builder import build_friendly_path
from .errors import FriendlyUrlError


@dataclass(frozen=True)
class RedirectTarget:
    """A resolved friendly URL."""
    
    url: str
    status_code: int = 301
    mapping: Optional[FriendlyUrlMapping] = None


@dataclass(frozen=True)
class Miss:
    """No mapping for a path."""
    
    path: str
    reason: str = "not_found"


ResolveResult = Union[RedirectTarget, Miss]


class ResolutionGateway:
    """Translates inbound friendly URLs into redirect targets."""
    
    def __init__(
        self,
        store: MappingStoreBase,
        settings: Optional[UrlSettings] = None,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize resolution gateway.
        
        Args:
            store: Mapping store
            settings: URL policy snapshot (for the base path)
            cache: Optional cache of friendly URL -> original URL
            logger: Optional logger
        """
        self.store = store
        self.settings = settings or UrlSettings()
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self._prefixes = tuple(
            f"{self.settings.base_path}/{prefix}/".lower() for prefix in URL_PREFIXES
        )
        self._background: Set[asyncio.Task] = set()
    
    def is_friendly_url(self, path: Optional[str]) -> bool:
        """Check whether a path has the shape of a friendly URL.
        
        Args:
            path: Request path
            
        Returns:
            True if the path starts with one of the kind prefixes under the
            configured base path
        """
        if not path:
            return False
        return path.lower().startswith(self._prefixes)
    
    async def resolve(self, path: str) -> ResolveResult:
        """Resolve a request path.
        
        On a hit the mapping's access statistics are updated and its original
        URL is returned with permanent redirect semantics.
        
        Args:
            path: Request path
            
        Returns:
            RedirectTarget on hit, Miss otherwise
        """
        if not self.is_friendly_url(path):
            return Miss(path, reason="not_friendly")
        
        key = normalize_friendly_url(path)
        
        if self.cache:
            cached_url = await self.cache.get_original_url(key)
            if cached_url:
                self.logger.debug(f"Cache hit for {key}")
                # Statistics are best effort; record them off the hot path
                task = asyncio.create_task(self._record_access_by_path(key))
                self._background.add(task)
                task.add_done_callback(self._background.discard)
                return RedirectTarget(url=cached_url)
        
        try:
            mapping = await self.store.find_by_friendly_url(key)
        except FriendlyUrlError as e:
            self.logger.error(f"Error resolving friendly URL {path}: {e}")
            return Miss(path, reason="storage_error")
        
        if mapping is None:
            self.logger.warning(f"No mapping found for friendly URL: {path}")
            return Miss(path)
        
        recorded = await self._record_access(mapping)
        
        # The lookup came first, so this request still redirects; only live
        # mappings are cached
        if recorded is not None:
            mapping = recorded
            if self.cache:
                await self.cache.store(key, mapping.original_url)
        
        self.logger.info(f"Redirecting {path} to {mapping.original_url}")
        return RedirectTarget(url=mapping.original_url, mapping=mapping)
    
    async def resolve_slug(self, kind: str, *segments: str) -> ResolveResult:
        """Resolve a friendly URL given without the base path.
        
        Args:
            kind: Kind prefix (movie, show, ...)
            segments: Remaining path segments
            
        Returns:
            RedirectTarget on hit, Miss otherwise
        """
        return await self.resolve(build_friendly_path(self.settings.base_path, kind, *segments))
    
    async def _record_access(self, mapping: FriendlyUrlMapping) -> Optional[FriendlyUrlMapping]:
        """Count a resolution on the stored row.
        
        Returns:
            The updated mapping; the looked-up one if the update failed; None
            if the mapping was deactivated or deleted after the lookup
        """
        try:
            recorded = await self.store.record_access(mapping.id, utcnow())
        except FriendlyUrlError as e:
            # A lost increment is acceptable, the redirect still happens
            self.logger.error(f"Error updating access statistics for {mapping.friendly_url}: {e}")
            return mapping
        if recorded is None:
            self.logger.info(f"Mapping {mapping.id} was removed while resolving {mapping.friendly_url}")
        return recorded
    
    async def _record_access_by_path(self, key: str) -> None:
        try:
            mapping = await self.store.find_by_friendly_url(key)
        except FriendlyUrlError as e:
            self.logger.error(f"Error loading mapping for {key}: {e}")
            return
        if mapping is None or await self._record_access(mapping) is None:
            # Mapping was removed after it was cached
            if self.cache:
                await self.cache.evict(key)
    
    async def invalidate(self, friendly_url: str) -> None:
        """Drop a friendly URL from the cache."""
        if self.cache:
            await self.cache.evict(friendly_url)
    
    async def drain(self) -> None:
        """Wait for pending background statistic updates."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
