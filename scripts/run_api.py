#!/usr/bin/env python3
"""
Start the Finvu AA consent gateway with uvicorn.

Usage (from repo root):
  python scripts/run_api.py
  python scripts/run_api.py --port 3002 --reload

Host/port default to the values in config/finvu_aa_config.yml (HOST/PORT
environment variables override them). FINVU_BASE_URL, FINVU_USER_ID and
FINVU_PASSWORD must be set, otherwise startup fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import uvicorn
from dotenv import load_dotenv

from src.integrations.finvu.errors import ConfigurationError
from src.utils.config_loader import load_gateway_config


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        config = load_gateway_config()
    except ConfigurationError as e:
        print(f"\nERROR: {e}")
        return 1

    parser = argparse.ArgumentParser(description="Finvu AA consent gateway")
    parser.add_argument("--host", default=config.server.host, help=f"Bind host (default: {config.server.host})")
    parser.add_argument("--port", type=int, default=config.server.port, help=f"Bind port (default: {config.server.port})")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload for development")
    args = parser.parse_args()

    uvicorn.run(
        "src.api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
