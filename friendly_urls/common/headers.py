"""Header parsing utilities for building public links."""

from typing import Dict, Optional


def extract_forwarded_headers(headers: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Extract X-Forwarded-* headers from request.
    
    Args:
        headers: Request headers dictionary
        
    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for
    """
    headers_lower = {k.lower(): v for k, v in headers.items()}
    
    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
    }


def build_public_origin(
    headers: Dict[str, str],
    fallback_origin: Optional[str] = None,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
    force_https: bool = False,
) -> Optional[str]:
    """Build the public origin (scheme://host) for absolute friendly links.
    
    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Configured public host
    3. Request scheme + host
    
    Args:
        headers: Request headers
        fallback_origin: Configured public host from configuration
        request_scheme: Request scheme (http/https)
        request_host: Request host
        force_https: Rewrite the scheme to https
        
    Returns:
        Origin such as https://media.example.com, or None if nothing is known
    """
    forwarded = extract_forwarded_headers(headers)
    
    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        origin = f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"
    elif fallback_origin:
        origin = fallback_origin.rstrip("/")
        if "://" not in origin:
            origin = f"{request_scheme or 'http'}://{origin}"
    elif request_scheme and request_host:
        origin = f"{request_scheme}://{request_host}"
    else:
        return None
    
    if force_https and origin.startswith("http://"):
        origin = "https://" + origin[len("http://"):]
    return origin
