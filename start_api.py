#!/usr/bin/env python3
"""
Run the Family Organiser companion API locally.

Usage:
    python start_api.py               # http://127.0.0.1:8001
    python start_api.py --reload      # restart on code changes
    python start_api.py --port 8080
"""

import argparse

import uvicorn

import settings

SOURCE_DIRS = ["api", "auth", "backend", "dashboard", "maps", "schedule"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Family Organiser companion API")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to listen on (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8001, help="Port to listen on (default: 8001)")
    parser.add_argument("--reload", action="store_true", help="Restart when source files change")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings.configure_logging()

    print(f"📅 Family Organiser API on http://{args.host}:{args.port} (docs at /docs)")
    print(f"   Events backend: {settings.BACKEND_URL}")
    print(f"   Session file:   {settings.SESSION_FILE}")

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=SOURCE_DIRS if args.reload else None,
        log_level="debug" if args.reload else "info",
    )


if __name__ == "__main__":
    main()
