from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from townlink.config import load_config

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the TownLink directory API and its admin routes")
    parser.add_argument("--host", default=os.getenv("TOWNLINK_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("TOWNLINK_PORT", "3000")))
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=os.getenv("TOWNLINK_LOG_LEVEL", "info"))
    parser.add_argument("--workers", type=int, default=1, help="Ignored together with --reload")
    parser.add_argument("--reload", action="store_true", help="Restart on source changes (development only)")
    return parser


def main() -> None:
    args = build_parser().parse_args()

    try:
        config = load_config()
    except RuntimeError as exc:
        sys.exit(f"Cannot start directory API: {exc}")
    if not config.admin_key:
        print("ADMIN_KEY is not set; moderation endpoints will refuse every request.", file=sys.stderr)

    uvicorn.run(
        "townlink.api:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        workers=None if args.reload else args.workers,
    )


if __name__ == "__main__":
    main()
