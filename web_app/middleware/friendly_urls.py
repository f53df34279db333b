"""Friendly URL interception middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse
from typing import Callable

from friendly_urls.resolver import RedirectTarget


class FriendlyUrlMiddleware(BaseHTTPMiddleware):
    """Redirect requests for friendly URLs to their original URLs.
    
    Paths that do not look like friendly URLs pass straight through without
    touching the mapping store.
    """
    
    async def dispatch(self, request: Request, call_next: Callable):
        """Resolve friendly paths, pass everything else on."""
        service = getattr(request.app.state, "service", None)
        if service is None or request.method not in ("GET", "HEAD"):
            return await call_next(request)
        
        gateway = service.gateway
        path = request.url.path
        if not gateway.is_friendly_url(path):
            return await call_next(request)
        
        result = await gateway.resolve(path)
        if isinstance(result, RedirectTarget):
            return RedirectResponse(url=result.url, status_code=result.status_code)
        
        return JSONResponse(
            status_code=404,
            content={"detail": f"Content not found for URL: {path}"},
        )
