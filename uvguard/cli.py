"""Command-line check of the UV index at a coordinate."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from uvguard.config import Settings, settings as default_settings
from uvguard.errors import UVGuardError
from uvguard.models import UVResponse
from uvguard.risk import get_risk_color, risk_level
from uvguard.service import UVService
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uvguard", description="Report UV exposure risk at a location.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude in decimal degrees")
    parser.add_argument("--lng", type=float, required=True, help="Longitude in decimal degrees")
    parser.add_argument("--save", action="store_true", help="Persist the reading to the document store")
    parser.add_argument("--history", action="store_true", help="List stored readings after the lookup")
    return parser


def format_reading(data: UVResponse) -> str:
    """One-line human summary of a UVResponse."""
    result = data.result
    level = risk_level(result.uv) or "unknown"
    return (
        f"UV {result.uv:.1f} ({level}, {get_risk_color(result.uv)}) | "
        f"max {result.uv_max:.1f} ({result.uv_max_risk}) | ozone {result.ozone:.1f} DU"
    )


async def run(args: argparse.Namespace, service: UVService) -> int:
    data = await service.get_uv_data(args.lat, args.lng)
    print(format_reading(data))
    if args.save:
        record_id = await service.save_uv_record(data)
        print(f"saved: {record_id}" if record_id else "saved: pending (store unavailable)")
    if args.history:
        for record in await service.list_history():
            stamp = record.timestamp.isoformat() if record.timestamp else "-"
            print(f"{stamp}  UV {record.uv_index:.1f}  {record.risk_level}  [{record.metadata.status}]")
    return 0


def main(argv: Optional[List[str]] = None, settings: Settings | None = None) -> int:
    settings = settings or default_settings
    setup_logging(level=settings.log_level, job_name="uvguard")
    args = build_parser().parse_args(argv)
    service = UVService(settings)
    try:
        return asyncio.run(run(args, service))
    except UVGuardError as exc:
        logger.error("UV lookup failed: %s", exc, extra={"error_type": type(exc).__name__})
        return 1


if __name__ == "__main__":
    sys.exit(main())
