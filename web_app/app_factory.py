"""FastAPI application factory."""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from friendly_urls.common.logging_config import get_logger
from friendly_urls.errors import StorageError
from .api import api_router
from .web import web_router
from .middleware.friendly_urls import FriendlyUrlMiddleware
from .middleware.logging import LoggingMiddleware


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Report an unreachable or corrupt mapping store as 503."""
    get_logger("friendly_urls.web").error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Mapping store unavailable", "detail": str(exc)},
    )


def create_app(
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.
    
    Args:
        service_instance: FriendlyUrlService instance (None if set later by the lifespan)
        config: Configuration instance
        
    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Friendly URLs",
        description="Human-readable URLs for media server content",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    
    app.state.service = service_instance
    app.state.config = config
    
    app.add_exception_handler(StorageError, storage_error_handler)
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Middleware added last runs outermost, so logging also covers redirects
    app.add_middleware(FriendlyUrlMiddleware)
    app.add_middleware(LoggingMiddleware)
    
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])
    
    return app
