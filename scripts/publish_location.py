"""
CLI helper to publish (or clear) a bus's live location, as the driver app does.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dashboard.dependencies import get_repository
from dashboard.errors import BackendError
from dashboard.schemas import LiveLocationIn
from pydantic import ValidationError

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Publish a bus live location")
    parser.add_argument("bus_id", help="Bus document id")
    parser.add_argument("--lat", type=float, help="Latitude in degrees")
    parser.add_argument("--lng", type=float, help="Longitude in degrees")
    parser.add_argument("--speed", type=float, default=None, help="Speed in km/h")
    parser.add_argument(
        "--heading", type=float, default=None, help="Heading in degrees"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove the bus's live location instead of publishing one",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    repo = get_repository()
    try:
        if args.clear:
            repo.clear_live_location(args.bus_id)
            logger.info("Cleared live location for %s", args.bus_id)
            return 0
        if args.lat is None or args.lng is None:
            parser.error("--lat and --lng are required unless --clear is given")
        location = repo.publish_live_location(
            args.bus_id,
            LiveLocationIn(
                latitude=args.lat,
                longitude=args.lng,
                speed=args.speed,
                heading=args.heading,
            ),
        )
    except ValidationError as e:
        parser.error(str(e))
    except BackendError as e:
        logger.error("Backend error: %s", e.message)
        return 1
    logger.info(
        "Published %s at %.6f, %.6f (%d)",
        location.bus_id,
        location.latitude,
        location.longitude,
        location.timestamp,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
