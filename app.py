#!/usr/bin/env python3
"""
Main entry point for the friendly URL service.

Usage:
    python app.py

Environment variables:
    STORE_BACKEND - 'json' (default) or 'postgres'
    DATA_FILE - JSON mapping file path (json backend)
    POSTGRES_URL - PostgreSQL connection URL (postgres backend)
    POSTGRES_CREATE_TABLES - Set to '1' to enable table creation
    REDIS_URL - Redis connection URL (optional)
    CATALOG_FILE - JSON catalog export to load at startup
    BASE_URL - Base path for friendly URLs (default /web)
    AUTO_GENERATE_URLS - Generate URLs for catalog changes and scan at startup
    PORT - Port to listen on
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from friendly_urls.factory import build_service
from friendly_urls.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger
    
    logger.info("Starting friendly URL service...")
    
    service = await build_service(config, logger=logger)
    app.state.service = service
    
    health = await service.health_check()
    if not health["database"]:
        logger.error(f"{service.store.backend_name} mapping store is not reachable, friendly URLs will not resolve")
    
    # Listener always runs; the initial scan only when auto-generation is on
    await service.worker.start(initial_scan=config.auto_generate_urls)
    
    logger.info("Service started successfully")
    
    yield
    
    logger.info("Shutting down friendly URL service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()
    
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )
    
    logger.info("Friendly URL Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'postgres_url', 'redis_url'})}")
    
    if config.workers > 1 and config.store_backend == "json":
        logger.info(
            f"{config.workers} workers share {config.data_file}; writes are serialized "
            "by a file lock and every worker runs its own catalog scan"
        )
    
    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
    app.router.lifespan_context = lifespan
    
    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )
    
    server = uvicorn.Server(uvicorn_config)
    
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True
    
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    
    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
