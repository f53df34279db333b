"""Catalog items and the catalog source seam.

The media server owns the catalog. This module defines the shape of the items
the friendly URL service consumes, an abstract source the sync worker and the
service talk to, and an in-memory implementation that can be loaded from a
JSON catalog export.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional


class ItemKind(str, Enum):
    """Kinds of catalog items."""
    
    MOVIE = "movie"
    SHOW = "show"
    SEASON = "season"
    EPISODE = "episode"
    PERSON = "person"
    COLLECTION = "collection"
    GENRE = "genre"
    STUDIO = "studio"
    FOLDER = "folder"
    OTHER = "other"
    
    @classmethod
    def parse(cls, value) -> "ItemKind":
        """Parse a kind tag, mapping unknown tags to OTHER."""
        if isinstance(value, cls):
            return value
        aliases = {
            "series": cls.SHOW,
            "boxset": cls.COLLECTION,
            "collectionfolder": cls.FOLDER,
            "userrootfolder": cls.FOLDER,
        }
        key = str(value or "").strip().lower()
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


class ChangeType(str, Enum):
    """Catalog change notification types."""
    
    ADDED = "added"
    UPDATED = "updated"


@dataclass
class CatalogItem:
    """A content entity supplied by the catalog."""
    
    id: str
    kind: ItemKind
    name: str = ""
    production_year: Optional[int] = None
    series_name: Optional[str] = None
    season_index: Optional[int] = None
    episode_index: Optional[int] = None
    parent_id: Optional[str] = None
    series_id: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: dict) -> "CatalogItem":
        """Create from dictionary."""
        def _int(value):
            return int(value) if value not in (None, "") else None
        
        return cls(
            id=str(data["id"]),
            kind=ItemKind.parse(data.get("kind") or data.get("type")),
            name=data.get("name") or "",
            production_year=_int(data.get("production_year")),
            series_name=data.get("series_name"),
            season_index=_int(data.get("season_index")),
            episode_index=_int(data.get("episode_index")),
            parent_id=str(data["parent_id"]) if data.get("parent_id") else None,
            series_id=str(data["series_id"]) if data.get("series_id") else None,
        )
    
    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "production_year": self.production_year,
            "series_name": self.series_name,
            "season_index": self.season_index,
            "episode_index": self.episode_index,
            "parent_id": self.parent_id,
            "series_id": self.series_id,
        }


@dataclass
class CatalogChangeNotification:
    """A catalog item was added or updated."""
    
    change: ChangeType
    item: CatalogItem


class CatalogSource(ABC):
    """Read access to the media server's content catalog."""
    
    @abstractmethod
    async def get_item(self, item_id: str) -> Optional[CatalogItem]:
        """Get a single item by id.
        
        Args:
            item_id: Catalog item identifier
            
        Returns:
            The item or None if the catalog does not know it
        """
        pass
    
    @abstractmethod
    async def get_root_folders(self) -> List[CatalogItem]:
        """Get the top level containers of the catalog."""
        pass
    
    @abstractmethod
    async def get_recursive_children(self, item: CatalogItem) -> List[CatalogItem]:
        """Get all descendants of an item (depth first, parents before children)."""
        pass


class InMemoryCatalog(CatalogSource):
    """Catalog held in memory, optionally loaded from a JSON export.
    
    Items without a ``parent_id`` are root folders. Seasons and episodes that
    carry a ``series_id`` but no ``series_name`` get their series name
    resolved from the catalog.
    """
    
    def __init__(
        self,
        items: Optional[Iterable[CatalogItem]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self._items: Dict[str, CatalogItem] = {}
        self._children: Dict[Optional[str], List[str]] = {}
        for item in items or []:
            self.add(item)
    
    @classmethod
    def from_json_file(cls, path: str, logger: Optional[logging.Logger] = None) -> "InMemoryCatalog":
        """Load a catalog export.
        
        The file holds either a list of items or an object with an ``items``
        list.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        entries = raw.get("items", []) if isinstance(raw, dict) else raw
        catalog = cls([CatalogItem.from_dict(entry) for entry in entries], logger=logger)
        catalog.logger.info(f"Loaded {len(catalog)} catalog items from {path}")
        return catalog
    
    def __len__(self) -> int:
        return len(self._items)
    
    def add(self, item: CatalogItem) -> CatalogItem:
        """Add or replace an item."""
        previous = self._items.get(item.id)
        if previous is not None:
            self._children.get(previous.parent_id, []).remove(item.id)
        self._items[item.id] = item
        self._children.setdefault(item.parent_id, []).append(item.id)
        return self._resolve_series(item)
    
    async def get_item(self, item_id: str) -> Optional[CatalogItem]:
        item = self._items.get(str(item_id))
        if item is None:
            return None
        return self._resolve_series(item)
    
    async def get_root_folders(self) -> List[CatalogItem]:
        return [self._resolve_series(self._items[i]) for i in self._children.get(None, [])]
    
    async def get_recursive_children(self, item: CatalogItem) -> List[CatalogItem]:
        result = []
        stack = list(reversed(self._children.get(item.id, [])))
        while stack:
            child = self._items[stack.pop()]
            result.append(self._resolve_series(child))
            stack.extend(reversed(self._children.get(child.id, [])))
        return result
    
    def _resolve_series(self, item: CatalogItem) -> CatalogItem:
        if item.series_name or item.kind not in (ItemKind.SEASON, ItemKind.EPISODE):
            return item
        series_id = item.series_id
        if series_id is None:
            # Walk up the parents until we hit the show
            parent_id = item.parent_id
            while parent_id is not None:
                parent = self._items.get(parent_id)
                if parent is None:
                    break
                if parent.kind == ItemKind.SHOW:
                    series_id = parent.id
                    break
                parent_id = parent.parent_id
        series = self._items.get(series_id) if series_id else None
        if series is None or not series.name:
            return item
        return replace(item, series_id=series.id, series_name=series.name)
