"""URL building utilities for friendly URLs."""

from typing import Optional
from urllib.parse import quote


DEFAULT_BASE_PATH = "/web"


def normalize_base_path(base_url: Optional[str]) -> str:
    """Normalize the configured base path.
    
    Args:
        base_url: Configured base path (e.g., /web or /web/)
        
    Returns:
        Base path with a leading slash and no trailing slash. An empty or
        root value yields an empty string so paths start at "/".
    """
    if base_url is None:
        return DEFAULT_BASE_PATH
    base = base_url.strip().rstrip("/")
    if not base:
        return ""
    if not base.startswith("/"):
        base = "/" + base
    return base


def build_friendly_path(base_url: str, kind: str, *segments: str) -> str:
    """Build a friendly URL path.
    
    Args:
        base_url: Base path (already normalized or raw)
        kind: Kind prefix (movie, show, person, ...)
        segments: Remaining path segments
        
    Returns:
        Path like /web/show/the-office-2005/season-2
    """
    parts = [normalize_base_path(base_url), kind.strip("/")]
    parts.extend(s.strip("/") for s in segments if s)
    return "/".join(parts)


def build_original_url(base_url: str, item_id: str, server_id: Optional[str] = None) -> str:
    """Build the host's item-detail URL for an item.
    
    Args:
        base_url: Base path of the host web client
        item_id: Catalog item identifier
        server_id: Optional server identifier
        
    Returns:
        Internal URL like /web/index.html#!/details?id=abc&serverId=xyz
    """
    url = f"{normalize_base_path(base_url)}/index.html#!/details?id={quote(str(item_id), safe='')}"
    if server_id:
        url += f"&serverId={quote(server_id, safe='')}"
    return url


def build_absolute_url(path: str, origin: Optional[str] = None) -> str:
    """Build an absolute link for a friendly path.
    
    Args:
        path: Friendly URL path
        origin: Public origin (e.g., https://media.example.com)
        
    Returns:
        Absolute URL, or the path unchanged when no origin is known
    """
    if not origin:
        return path
    return f"{origin.rstrip('/')}{path}"
