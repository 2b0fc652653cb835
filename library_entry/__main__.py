"""
Run the library entry service.

Usage: python -m library_entry [--host HOST] [--port PORT] [--log-level LEVEL]

Command-line flags override the LIBRARY_ENTRY_* environment settings for
this process only.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from .core.config import settings

# Loggers that drown out entry decisions at INFO.
QUIET_LOGGERS = ("uvicorn.access", "asyncpg")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the service."""
    name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="library-entry", description=__doc__.splitlines()[1])
    parser.add_argument("--host", default=settings.server.host)
    parser.add_argument("--port", type=int, default=settings.server.port)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def log_startup(logger: logging.Logger, host: str, port: int) -> None:
    """Log where the service listens and the thresholds it will apply."""
    scoring = settings.scoring
    occupancy = settings.occupancy
    logger.info("Listening on %s:%d", host, port)
    logger.info(
        "Reference point (%.5f, %.5f), zone %.0f-%.0f m, SSID %r",
        scoring.reference_latitude,
        scoring.reference_longitude,
        scoring.inside_radius_meters,
        scoring.outside_radius_meters,
        scoring.expected_ssid,
    )
    logger.info(
        "Auto-log at %d, manual confirmation from %d, debounce %.0f min, default space %s",
        scoring.auto_threshold,
        scoring.borderline_min,
        occupancy.debounce_minutes,
        occupancy.default_space_id,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the library-entry console script."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger("library.entry")
    log_startup(logger, args.host, args.port)

    try:
        uvicorn.run(
            "library_entry.api.main:app",
            host=args.host,
            port=args.port,
            reload=settings.server.debug,
            log_level=args.log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.exception("Server error: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
