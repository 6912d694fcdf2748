from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

import uvicorn
from dotenv import load_dotenv

from .app import create_app
from .config import AppConfig, load_config


LOGGER = logging.getLogger(__name__)


def _load_env_files(config_path: Path | None) -> None:
    """Load environment variables from .env files."""

    # Load default .env in current working directory if present
    load_dotenv(override=False)

    # Load .env placed next to the config file if it exists
    if config_path is not None:
        config_env = config_path.parent / ".env"
        if config_env.exists():
            load_dotenv(dotenv_path=config_env, override=False)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve spreadsheet cleaning suggestions from an LLM over HTTP"
    )
    parser.add_argument("--config", default=None, help="Path to the YAML configuration file")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to listen on (defaults to $PORT or 8000)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config_path = Path(args.config).expanduser().resolve() if args.config else None
    _load_env_files(config_path)
    config = load_config(config_path) if config_path else AppConfig()

    if not config.llm.resolve_api_key():
        LOGGER.warning(
            "API key is not configured (%s); analysis requests will fail until it is set",
            config.llm.api_key_env,
        )

    LOGGER.info("Starting Clean Sheets API on %s:%s", args.host, args.port)
    uvicorn.run(
        create_app(config),
        host=args.host,
        port=args.port,
        log_level="debug" if args.verbose else "info",
    )
    return 0


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":  # pragma: no cover
    run()
