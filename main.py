"""Command-line entry point for serving the Agent K HTTP API."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import uvicorn

from agentk.api import create_app
from agentk.config import config
from agentk.pipeline import build_services

if TYPE_CHECKING:
    from collections.abc import Sequence


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Serve the Agent K question-answering API.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address for the HTTP server (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the HTTP server (default: 3000).",
    )
    parser.add_argument(
        "--knowledge-base",
        type=Path,
        default=None,
        help="Path to the knowledge base JSON file "
        "(default: KNOWLEDGE_BASE_PATH or data/knowledge-base.json).",
    )
    parser.add_argument(
        "--no-embeddings",
        dest="embeddings",
        action="store_false",
        help="Skip semantic scoring and rank with keywords only.",
    )
    parser.set_defaults(embeddings=None)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration, build services and run the server."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    services = build_services(
        knowledge_base_path=args.knowledge_base,
        embeddings_enabled=args.embeddings,
    )
    app = create_app(services)

    logger.info(
        "%s live on http://%s:%s", services.engine.persona_name, args.host, args.port
    )
    try:
        uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Agent K stopped by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
