"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable, Iterable, Optional

from friendly_urls.common.logging_config import get_logger


# Polled by load balancers; logged at DEBUG only
QUIET_PATHS = ("/health", "/api/health")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status, duration and redirect target."""
    
    def __init__(
        self,
        app,
        logger: Optional[logging.Logger] = None,
        quiet_paths: Iterable[str] = QUIET_PATHS,
    ):
        """Initialize logging middleware.
        
        Args:
            app: ASGI app
            logger: Optional logger
            quiet_paths: Paths logged at DEBUG instead of INFO
        """
        super().__init__(app)
        self.logger = logger or get_logger("friendly_urls.web")
        self.quiet_paths = frozenset(quiet_paths)
    
    async def dispatch(self, request: Request, call_next: Callable):
        """Log the response of a request."""
        start = time.perf_counter()
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(f"{request.method} {path} from {client_ip} failed")
            raise
        
        duration_ms = (time.perf_counter() - start) * 1000
        message = f"{request.method} {path} from {client_ip} - {response.status_code} in {duration_ms:.2f}ms"
        
        location = response.headers.get("location")
        if location and 300 <= response.status_code < 400:
            message += f" -> {location}"
        
        level = logging.DEBUG if path in self.quiet_paths else logging.INFO
        self.logger.log(level, message)
        
        return response
