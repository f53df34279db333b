"""Friendly URL generation for catalog items."""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .catalog import CatalogItem, ItemKind
from .slug import SlugNormalizer
from .database.models import FriendlyUrlMapping, utcnow
from .common.url_builder import (
    DEFAULT_BASE_PATH,
    normalize_base_path,
    build_friendly_path,
    build_original_url,
)


# Kinds that have their own feature toggle. Seasons and episodes follow shows.
TOGGLED_KINDS = (
    ItemKind.MOVIE,
    ItemKind.SHOW,
    ItemKind.PERSON,
    ItemKind.COLLECTION,
    ItemKind.GENRE,
    ItemKind.STUDIO,
)

# Path prefixes a friendly URL can start with (below the base path)
URL_PREFIXES = ("movie", "show", "person", "collection", "genre", "studio")


@dataclass(frozen=True)
class UrlSettings:
    """Immutable snapshot of the URL policy configuration."""
    
    base_url: str = DEFAULT_BASE_PATH
    force_https: bool = False
    enabled_kinds: FrozenSet[ItemKind] = field(default_factory=lambda: frozenset(TOGGLED_KINDS))
    auto_generate: bool = True
    server_id: Optional[str] = None
    
    @property
    def base_path(self) -> str:
        return normalize_base_path(self.base_url)
    
    def is_enabled(self, kind: ItemKind) -> bool:
        """Whether friendly URLs are enabled for an item kind."""
        if kind in (ItemKind.SEASON, ItemKind.EPISODE):
            kind = ItemKind.SHOW
        return kind in self.enabled_kinds


class UrlGenerator:
    """Builds friendly URLs and mapping records for catalog items."""
    
    def __init__(
        self,
        settings: Optional[UrlSettings] = None,
        slug_normalizer: Optional[SlugNormalizer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize URL generator.
        
        Args:
            settings: URL policy snapshot used when a call does not pass one
            slug_normalizer: Optional slug normalizer
            logger: Optional logger
        """
        self.settings = settings or UrlSettings()
        self.slugs = slug_normalizer or SlugNormalizer()
        self.logger = logger or logging.getLogger(__name__)
    
    def build_friendly_url(
        self,
        item: Optional[CatalogItem],
        settings: Optional[UrlSettings] = None,
    ) -> Optional[str]:
        """Generate the friendly URL for an item.
        
        Args:
            item: Catalog item
            settings: Optional settings override
            
        Returns:
            Friendly URL path or None if the item does not qualify
        """
        if item is None:
            return None
        
        settings = settings or self.settings
        if not settings.is_enabled(item.kind):
            return None
        
        base = settings.base_path
        kind = item.kind
        
        if kind in (ItemKind.MOVIE, ItemKind.SHOW):
            slug = self.slugs.create_slug(item.name)
            if not slug:
                return None
            if item.production_year:
                slug = f"{slug}-{item.production_year}"
            return build_friendly_path(base, kind.value, slug)
        
        if kind == ItemKind.SEASON:
            series_slug = self.slugs.create_slug(item.series_name)
            if not series_slug or item.season_index is None:
                return None
            return build_friendly_path(base, "show", series_slug, f"season-{item.season_index}")
        
        if kind == ItemKind.EPISODE:
            series_slug = self.slugs.create_slug(item.series_name)
            if not series_slug or item.season_index is None or item.episode_index is None:
                return None
            return build_friendly_path(
                base,
                "show",
                series_slug,
                f"season-{item.season_index}",
                f"episode-{item.episode_index}",
            )
        
        if kind in (ItemKind.PERSON, ItemKind.COLLECTION, ItemKind.GENRE, ItemKind.STUDIO):
            slug = self.slugs.create_slug(item.name)
            if not slug:
                return None
            return build_friendly_path(base, kind.value, slug)
        
        return None
    
    def build_mapping(
        self,
        item: Optional[CatalogItem],
        settings: Optional[UrlSettings] = None,
    ) -> Optional[FriendlyUrlMapping]:
        """Create a complete mapping record for an item.
        
        Nothing is persisted; the caller inserts the mapping into a store.
        
        Args:
            item: Catalog item
            settings: Optional settings override
            
        Returns:
            New active mapping or None if the item does not qualify
        """
        if item is None:
            self.logger.warning("Cannot create mapping for missing item")
            return None
        
        settings = settings or self.settings
        friendly_url = self.build_friendly_url(item, settings)
        if not friendly_url:
            self.logger.debug(f"No friendly URL for item {item.id} of kind {item.kind.value}")
            return None
        
        mapping = FriendlyUrlMapping(
            item_id=item.id,
            item_type=item.kind.value,
            friendly_url=friendly_url,
            original_url=build_original_url(settings.base_path, item.id, settings.server_id),
            created_at=utcnow(),
            is_active=True,
            access_count=0,
        )
        
        self.logger.debug(f"Created mapping for item {item.id}: {friendly_url} -> {mapping.original_url}")
        return mapping
