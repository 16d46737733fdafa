"""
Launch the relay with uvicorn.

Production binds 0.0.0.0:8080 over plain HTTP; TLS is handled by the
reverse proxy in front of the service.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from statsrelay.config import get_settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Serve pypistats download stats")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )
    logger.info(
        "Starting relay on %s:%d (%s)", args.host, args.port, settings.environment
    )
    uvicorn.run(
        "statsrelay.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload and settings.is_development,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
