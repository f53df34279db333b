#!/usr/bin/env python3
"""
Manually initialize the PostgreSQL table for friendly URL mappings.

Usage:
    python init_postgres_database.py --db-url postgresql://postgres@localhost:5432/friendly_urls
"""

import argparse
import asyncio
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from friendly_urls.database.postgres import PostgresMappingStore
from friendly_urls.errors import StorageError
from friendly_urls.common.logging_config import setup_logging


async def main():
    parser = argparse.ArgumentParser(description="Initialize PostgreSQL tables")
    parser.add_argument(
        "--db-url",
        default=os.getenv("POSTGRES_URL", "postgresql://postgres@localhost:5432/friendly_urls"),
        help="PostgreSQL connection URL"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    
    args = parser.parse_args()
    
    logger = setup_logging(level="DEBUG" if args.verbose else "INFO")
    
    store = PostgresMappingStore(db_config=args.db_url, logger=logger)
    try:
        logger.info("Initializing database tables...")
        await store.ensure_tables()
        logger.info("Tables initialized successfully")
        
        if not await store.health_check():
            logger.error("Database health check failed")
            return 1
        logger.info("Database health check passed")
        return 0
        
    except StorageError as e:
        logger.error(f"Error initializing tables: {e}")
        return 1
    finally:
        await store.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
