from __future__ import annotations

import argparse
import logging
from pathlib import Path

import uvicorn

from .config import load_settings
from .service import create_app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the content transform endpoint.")
    parser.add_argument("--config", type=Path, help="Path to config YAML (default: config/default.yaml).")
    parser.add_argument("--host", help="Interface to bind (default: HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, help="Port to listen on (default: PORT or 5000).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = load_settings(args.config)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )
    app = create_app(settings)
    uvicorn.run(app, host=args.host or settings.host, port=args.port or settings.port, log_config=None)


if __name__ == "__main__":
    main()
