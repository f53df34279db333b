"""Mapping store layer for friendly URLs."""

import logging
from typing import Optional

from .base import MappingStoreBase
from .json_file import JsonFileMappingStore
from .postgres import PostgresMappingStore
from .models import FriendlyUrlMapping


def create_mapping_store(
    backend: str,
    data_file: str,
    postgres_url: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> MappingStoreBase:
    """Create the configured mapping store.
    
    Args:
        backend: "json" or "postgres"
        data_file: JSON document path (json backend)
        postgres_url: Connection string (postgres backend)
        logger: Optional logger
        
    Returns:
        Mapping store instance
    """
    backend = (backend or "json").lower()
    if backend == "json":
        return JsonFileMappingStore(db_config=data_file, logger=logger)
    if backend in ("postgres", "postgresql"):
        if not postgres_url:
            raise ValueError("postgres_url is required for the postgres store backend")
        return PostgresMappingStore(db_config=postgres_url, logger=logger)
    raise ValueError(f"Unknown store backend: {backend}")


__all__ = [
    "MappingStoreBase",
    "JsonFileMappingStore",
    "PostgresMappingStore",
    "FriendlyUrlMapping",
    "create_mapping_store",
]
