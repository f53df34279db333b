"""Validation utilities for friendly URLs."""

import re
from typing import Tuple


_ITEM_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def is_valid_item_id(item_id: str, max_length: int = 64) -> Tuple[bool, str]:
    """Validate a catalog item identifier.
    
    Args:
        item_id: The identifier to validate
        max_length: Maximum accepted length
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not item_id or not isinstance(item_id, str):
        return False, "Item id is required"
    
    if len(item_id) > max_length:
        return False, f"Item id must be at most {max_length} characters"
    
    if not _ITEM_ID_RE.match(item_id):
        return False, "Item id can only contain letters, numbers, hyphens, and underscores"
    
    return True, ""


def is_valid_base_path(base_url: str) -> Tuple[bool, str]:
    """Validate the configured base path.
    
    Args:
        base_url: Base path such as /web
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if base_url is None:
        return False, "Base path is required"
    
    stripped = base_url.strip()
    if "://" in stripped:
        return False, "Base path must be a path, not an absolute URL"
    
    if any(c in stripped for c in "?#"):
        return False, "Base path cannot contain a query or fragment"
    
    if " " in stripped:
        return False, "Base path cannot contain spaces"
    
    return True, ""
