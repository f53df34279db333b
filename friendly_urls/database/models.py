"""Data models for friendly URL mappings."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class FriendlyUrlMapping:
    """Represents a friendly URL mapping in the store."""
    
    item_id: str
    item_type: str
    friendly_url: str
    original_url: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    is_active: bool = True
    access_count: int = 0
    last_accessed: Optional[datetime] = None
    
    @property
    def lookup_key(self) -> str:
        """Key used for case-insensitive friendly URL comparison."""
        return normalize_friendly_url(self.friendly_url)
    
    def copy(self, **changes) -> "FriendlyUrlMapping":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
    
    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "item_id": self.item_id,
            "item_type": self.item_type,
            "friendly_url": self.friendly_url,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "is_active": self.is_active,
            "access_count": self.access_count,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
        }
    
    @classmethod
    def from_dict(cls, data: dict) -> "FriendlyUrlMapping":
        """Create from dictionary (JSON document or database row)."""
        return cls(
            id=str(data["id"]),
            item_id=str(data["item_id"]),
            item_type=data.get("item_type", ""),
            friendly_url=data["friendly_url"],
            original_url=data["original_url"],
            created_at=_parse_datetime(data["created_at"]),
            updated_at=_parse_datetime(data.get("updated_at")),
            is_active=bool(data.get("is_active", True)),
            access_count=int(data.get("access_count") or 0),
            last_accessed=_parse_datetime(data.get("last_accessed")),
        )


def normalize_friendly_url(url: str) -> str:
    """Normalize a friendly URL for comparison (case-insensitive, no trailing slash)."""
    normalized = (url or "").strip().lower()
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized
