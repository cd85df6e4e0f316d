#!/usr/bin/env python3
"""
Storefront Runner
=================

Run the storefront backend in different modes.

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --storage file     # JSON file store instead of the database
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import sys

def run_main_app(host: str, port: int, reload: bool):
    """Run the FastAPI application"""
    import uvicorn

    print(f"Starting Storefront on {host}:{port}")
    print(f"API docs: http://localhost:{port}/api/docs")
    uvicorn.run(
        "storefront.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )

def main():
    parser = argparse.ArgumentParser(
        description="Storefront Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_app.py                      # Development server on port 8080
  python run_app.py --mode prod          # No auto-reload
  python run_app.py --storage file       # Persist to JSON files under DATA_DIR
        """,
    )

    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", 8080)),
        help="Port to bind to (default: 8080)",
    )
    parser.add_argument(
        "--storage",
        choices=["database", "file"],
        help="Storage backend, overrides STORAGE_BACKEND",
    )

    args = parser.parse_args()

    # Settings are read on import of the app, so set the backend first
    if args.storage:
        os.environ["STORAGE_BACKEND"] = args.storage

    run_main_app(args.host, args.port, reload=args.mode == "dev")
    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)
