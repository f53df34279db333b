#!/usr/bin/env python3
"""
Command-line interface for the friendly URL service.

Usage:
    python friendly_urls_cli.py generate <item_id>
    python friendly_urls_cli.py scan
    python friendly_urls_cli.py resolve <path>
    python friendly_urls_cli.py list [--inactive]
    python friendly_urls_cli.py delete <mapping_id>
    python friendly_urls_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from config import Config
from friendly_urls.factory import build_service
from friendly_urls.resolver import RedirectTarget
from friendly_urls.errors import FriendlyUrlError
from friendly_urls.common.logging_config import setup_logging


def _print(payload: dict, error: bool = False) -> None:
    print(json.dumps(payload, indent=2, default=str), file=sys.stderr if error else sys.stdout)


class FriendlyUrlsCLI:
    """Command-line interface for friendly URLs."""
    
    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.verbose = verbose
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service = None
    
    async def initialize(self):
        """Initialize store, catalog and service."""
        self.logger.info("Initializing friendly URL service...")
        self.service = await build_service(self.config, logger=self.logger)
        self.logger.info("Initialization complete")
    
    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()
    
    async def generate(self, item_id: str):
        """Generate a friendly URL for one item."""
        try:
            result = await self.service.generate_for_item(item_id)
        except FriendlyUrlError as e:
            _print({"success": False, "error": str(e)}, error=True)
            return 1
        
        if result.friendly_url is None:
            _print({"success": False, "item_id": item_id, "status": result.status.value}, error=True)
            return 1
        
        _print({
            "success": True,
            "item_id": item_id,
            "status": result.status.value,
            "friendly_url": result.friendly_url,
        })
        return 0
    
    async def scan(self):
        """Generate friendly URLs for the whole catalog."""
        try:
            result = await self.service.generate_all()
        except FriendlyUrlError as e:
            _print({"success": False, "error": str(e)}, error=True)
            return 1
        
        _print({"success": True, **result.to_dict()})
        return 0
    
    async def resolve(self, path: str):
        """Resolve a friendly URL (records an access)."""
        result = await self.service.gateway.resolve(path)
        
        if isinstance(result, RedirectTarget):
            _print({"success": True, "friendly_url": path, "original_url": result.url})
            return 0
        
        _print({"success": False, "friendly_url": path, "reason": result.reason}, error=True)
        return 1
    
    async def list_mappings(self, include_inactive: bool = False):
        """List mappings."""
        try:
            mappings = await self.service.list_mappings()
        except FriendlyUrlError as e:
            _print({"success": False, "error": str(e)}, error=True)
            return 1
        
        if not include_inactive:
            mappings = [m for m in mappings if m.is_active]
        
        _print({
            "success": True,
            "count": len(mappings),
            "mappings": [m.to_dict() for m in mappings],
        })
        return 0
    
    async def delete(self, mapping_id: str):
        """Delete or deactivate a mapping."""
        try:
            deleted = await self.service.delete_mapping(mapping_id)
        except FriendlyUrlError as e:
            _print({"success": False, "error": str(e)}, error=True)
            return 1
        
        if not deleted:
            _print({"success": False, "error": f"Mapping '{mapping_id}' not found"}, error=True)
            return 1
        
        _print({"success": True, "mapping_id": mapping_id})
        return 0
    
    async def health(self):
        """Check service health."""
        health_status = await self.service.health_check()
        stats = await self.service.get_statistics()
        
        _print({
            "success": True,
            "health": health_status,
            "statistics": stats,
        })
        return 0 if health_status["overall"] else 1


def _config_from_args(args) -> Config:
    overrides = {}
    for name in ("store_backend", "data_file", "postgres_url", "catalog_file", "base_url"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return Config(**overrides)


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Friendly URLs CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate URLs for a whole catalog export
  %(prog)s --catalog-file catalog.json scan
  
  # Generate a URL for one item
  %(prog)s --catalog-file catalog.json generate 6f1c0e
  
  # Resolve a friendly URL
  %(prog)s resolve /web/movie/inception-2010
  
  # List mappings, including deactivated ones
  %(prog)s list --inactive
        """
    )
    
    parser.add_argument("--store-backend", choices=["json", "postgres"], help="Mapping store backend")
    parser.add_argument("--data-file", help="JSON mapping file (json backend)")
    parser.add_argument("--postgres-url", help="PostgreSQL connection URL (postgres backend)")
    parser.add_argument("--catalog-file", help="JSON catalog export")
    parser.add_argument("--base-url", help="Base path for friendly URLs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    
    generate_parser = subparsers.add_parser("generate", help="Generate a friendly URL for an item")
    generate_parser.add_argument("item_id", help="Catalog item id")
    
    subparsers.add_parser("scan", help="Generate friendly URLs for the whole catalog")
    
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a friendly URL")
    resolve_parser.add_argument("path", help="Friendly URL path")
    
    list_parser = subparsers.add_parser("list", help="List mappings")
    list_parser.add_argument("--inactive", action="store_true", help="Include deactivated mappings")
    
    delete_parser = subparsers.add_parser("delete", help="Delete a mapping")
    delete_parser.add_argument("mapping_id", help="Mapping id")
    
    subparsers.add_parser("health", help="Check service health")
    
    args = parser.parse_args()
    
    if not args.command:
        parser.print_help()
        return 1
    
    cli = FriendlyUrlsCLI(config=_config_from_args(args), verbose=args.verbose)
    
    try:
        await cli.initialize()
        
        if args.command == "generate":
            return await cli.generate(args.item_id)
        elif args.command == "scan":
            return await cli.scan()
        elif args.command == "resolve":
            return await cli.resolve(args.path)
        elif args.command == "list":
            return await cli.list_mappings(args.inactive)
        elif args.command == "delete":
            return await cli.delete(args.mapping_id)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1
            
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
