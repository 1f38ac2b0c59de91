#!/usr/bin/env python3
"""
Command-line interface for Inventory Store
"""
import sys
import os
import asyncio
import argparse
import logging
from pathlib import Path

from .config import StoreConfig
from .errors import StoreError
from .store import InventoryStore


def resolve_log_level(level: str = None) -> str:
    """Log level from the command line, then $LOG_LEVEL, then INFO."""
    return (level or os.environ.get("LOG_LEVEL", "INFO")).upper()


def setup_logging(level: str) -> None:
    """Configure logging for the CLI and the server."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def open_store(cache: Path = None) -> InventoryStore:
    """Open (and if needed create) the store under ``cache``."""
    config = StoreConfig.from_env(cache)
    return asyncio.run(InventoryStore(config).open())


def init_command(cache: Path = None) -> int:
    """Create the cache directory, photo directory and an empty inventory document."""
    try:
        store = open_store(cache)
    except StoreError as e:
        print(f"❌ Error: {e}")
        return 1

    print(f"✅ Inventory document: {store.config.document_path}")
    print(f"✅ Photo directory: {store.config.blob_dir}")
    print(f"   {len(store.list())} items, next id {store.gate.snapshot.next_id}")
    return 0


def list_command(cache: Path = None) -> int:
    """Print all stored items."""
    try:
        store = open_store(cache)
    except StoreError as e:
        print(f"❌ Error: {e}")
        return 1

    items = store.list()
    if not items:
        print("No items registered")
        return 0

    for item in items:
        photo = f" 📷 {item.photo}" if item.photo else ""
        description = f" - {item.description}" if item.description else ""
        print(f"{item.id:>5}  {item.name}{description}{photo}")
    print(f"\n{len(items)} item(s)")
    return 0


def serve_command(host: str, port: int, cache: Path = None, log_level: str = "INFO") -> int:
    """Start the inventory API server."""
    import uvicorn
    from .api_server import create_app

    config = StoreConfig.from_env(cache)

    print(f"🚀 Starting Inventory Store API server...")
    print(f"📂 Cache directory: {config.cache_dir}")
    print(f"🌐 Server listening on http://{host}:{port}")
    print(f"📝 Register form: http://{host}:{port}/RegisterForm.html")
    print(f"🔍 Search form: http://{host}:{port}/SearchForm.html")
    print(f"📖 API docs: http://{host}:{port}/docs")
    print(f"Press Ctrl+C to stop\n")

    try:
        uvicorn.run(create_app(config), host=host, port=port, log_level=log_level.lower())
    except KeyboardInterrupt:
        print("\n\n👋 Server stopped")
    return 0


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser_cli = argparse.ArgumentParser(
        description="Inventory Store - Persistent inventory items with photos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the API server
  inventory-store serve --host 127.0.0.1 --port 3000 --cache ./cache

  # Create an empty store
  inventory-store init --cache ./cache

  # List stored items
  inventory-store list --cache ./cache

The cache directory defaults to $INVENTORY_CACHE_DIR, then ./cache.
        """
    )
    parser_cli.add_argument('--log-level', type=str, default=None, help='Log level (default: $LOG_LEVEL or INFO)')

    subparsers = parser_cli.add_subparsers(dest='command', help='Command to run')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Start the API server')
    serve_parser.add_argument('--host', '-H', type=str, default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('--port', '-p', type=int, default=3000, help='Port number (default: 3000)')
    serve_parser.add_argument('--cache', '-c', type=Path, help='Cache directory for inventory.json and photos')

    # Init command
    init_parser = subparsers.add_parser('init', help='Create an empty store')
    init_parser.add_argument('--cache', '-c', type=Path, help='Cache directory for inventory.json and photos')

    # List command
    list_parser = subparsers.add_parser('list', help='List stored items')
    list_parser.add_argument('--cache', '-c', type=Path, help='Cache directory for inventory.json and photos')

    args = parser_cli.parse_args(argv)
    log_level = resolve_log_level(args.log_level)
    setup_logging(log_level)

    if args.command == 'serve':
        return serve_command(args.host, args.port, args.cache, log_level)
    elif args.command == 'init':
        return init_command(args.cache)
    elif args.command == 'list':
        return list_command(args.cache)
    else:
        parser_cli.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
