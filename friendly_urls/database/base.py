"""Abstract base class for friendly URL mapping stores."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Dict, Any

from .models import FriendlyUrlMapping


class MappingStoreBase(ABC):
    """Abstract base class for mapping store operations.
    
    Implementations must keep at most one active mapping per item id and per
    friendly URL (case-insensitive), and must serialize the check-then-insert
    so concurrent generation of the same item cannot create duplicates.
    """
    
    backend_name = "abstract"
    
    def __init__(self, db_config: str):
        """Initialize store.
        
        Args:
            db_config: Store location (file path or connection string)
        """
        self.db_config = db_config
    
    @abstractmethod
    async def find_by_friendly_url(self, friendly_url: str) -> Optional[FriendlyUrlMapping]:
        """Get the active mapping for a friendly URL (case-insensitive).
        
        Args:
            friendly_url: The friendly URL path to lookup
            
        Returns:
            The mapping if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def find_by_item_id(self, item_id: str) -> Optional[FriendlyUrlMapping]:
        """Get the active mapping for a catalog item.
        
        Args:
            item_id: Catalog item identifier
            
        Returns:
            The mapping if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def get(self, mapping_id: str) -> Optional[FriendlyUrlMapping]:
        """Get a mapping by id, active or not."""
        pass
    
    @abstractmethod
    async def list_all(self) -> List[FriendlyUrlMapping]:
        """List every mapping, including inactive ones."""
        pass
    
    @abstractmethod
    async def insert(self, mapping: FriendlyUrlMapping) -> None:
        """Insert a new mapping.
        
        Args:
            mapping: The mapping to store
            
        Raises:
            ConflictError: If an active mapping already has the same
                friendly URL or item id
        """
        pass
    
    @abstractmethod
    async def update(self, mapping: FriendlyUrlMapping) -> FriendlyUrlMapping:
        """Overwrite a mapping by id and set its updated_at.
        
        Args:
            mapping: The mapping to store
            
        Returns:
            The stored mapping
            
        Raises:
            NotFoundError: If no mapping has this id
        """
        pass
    
    @abstractmethod
    async def delete(self, mapping_id: str) -> bool:
        """Remove a mapping.
        
        Args:
            mapping_id: Mapping id
            
        Returns:
            True if removed, False if it did not exist
        """
        pass
    
    @abstractmethod
    async def deactivate(self, mapping_id: str) -> bool:
        """Soft-delete a mapping (kept for audit, excluded from lookups).
        
        Args:
            mapping_id: Mapping id
            
        Returns:
            True if deactivated, False if it did not exist or was inactive
        """
        pass
    
    @abstractmethod
    async def record_access(self, mapping_id: str, accessed_at: datetime) -> Optional[FriendlyUrlMapping]:
        """Count one successful resolution of an active mapping.
        
        Only ``access_count``, ``last_accessed`` and ``updated_at`` change, on
        the current stored row, so a concurrent deactivation is never undone.
        
        Args:
            mapping_id: Mapping id
            accessed_at: Time of the resolution
            
        Returns:
            The updated mapping, or None if it no longer exists or is inactive
        """
        pass
    
    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Get store statistics.
        
        Returns:
            Dictionary with total_mappings, active_mappings, total_accesses
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Release resources."""
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is usable.
        
        Returns:
            True if healthy, False otherwise
        """
        pass
