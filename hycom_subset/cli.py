"""
HYCOM subset downloader - command line entry point.

Examples:
    # Nino 3.4 on one day
    hycom-subset --region 190 240 -5 5 --start 2010-01-01

    # The Bohai Sea every 3 hours for a month, ssh and temperature only
    hycom-subset --region 117.5 122.5 37 41 --start 2020-01-01 --end 2020-02-01 \
        --step-hours 3 --variables ssh temp --outdir data/bohai

    # Force a product
    hycom-subset --region 261 280 17.5 32.5 --start 2010-01-01 \
        --url http://tds.hycom.org/thredds/dodsC/GLBy0.08/expt_93.0?
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .core.exceptions import HycomError
from .core.helpers import time_span
from .core.models import RequestedRegion
from .core.logging_config import get_logger, setup_logging_from_env
from .data_manager.config import DownloadOptions, SUPPORTED_VARIABLES
from .services.hycom_service import HycomSubsetService
from .services.opendap_source import OpendapArraySource

logger = get_logger("hycom_subset.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hycom-subset",
        description="Download region/time subsets of the global HYCOM archive",
    )
    parser.add_argument("--region", nargs=4, type=float, required=True,
                        metavar=("WEST", "EAST", "SOUTH", "NORTH"),
                        help="Longitudes in 0..360 or -180..180, latitudes in -80..80")
    parser.add_argument("--start", required=True, help="First instant (UTC), e.g. 2010-01-01T00:00")
    parser.add_argument("--end", help="Last instant (UTC); default: --start")
    parser.add_argument("--step-hours", type=float, default=3.0, help="Spacing of instants (default: 3)")
    parser.add_argument("--variables", nargs="+", help=f"Any of: {' '.join(SUPPORTED_VARIABLES)}")
    parser.add_argument("--format", dest="output_format", choices=["native", "portable"],
                        help="native (.mat) or portable (.nc)")
    parser.add_argument("--outdir", help="Target directory")
    parser.add_argument("--prefix", help="File name prefix (default: region tag)")
    parser.add_argument("--url", help="Explicit HYCOM endpoint; bypasses product selection")
    parser.add_argument("--tolerance-days", type=float, help="Largest accepted time deviation")
    parser.add_argument("--retries", type=int, help="Attempts per instant")
    parser.add_argument("--retry-delay", type=float, help="Seconds between attempts")
    parser.add_argument("--config", type=Path, help="JSON options file; flags override it")
    parser.add_argument("--log-level", help="Logging level (default: $HYCOM_LOG_LEVEL or INFO)")
    return parser


def options_from_args(args: argparse.Namespace) -> DownloadOptions:
    data = DownloadOptions.load(args.config).to_dict() if args.config else {}
    overrides = {
        "target_directory": args.outdir,
        "variables": args.variables,
        "output_format": args.output_format,
        "filename_prefix": args.prefix,
        "explicit_endpoint": args.url,
        "tolerance_days": args.tolerance_days,
        "max_attempts": args.retries,
        "retry_delay_seconds": args.retry_delay,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return DownloadOptions.from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging_from_env(args.log_level)

    try:
        options = options_from_args(args)
        region = RequestedRegion.from_list(args.region)
        instants = time_span(args.start, args.end or args.start, args.step_hours)
    except (ValueError, OSError) as e:
        logger.error(f"Invalid arguments: {e}")
        return 2

    failures = 0
    with OpendapArraySource() as source:
        service = HycomSubsetService(options, source=source)
        for instant in instants:
            try:
                service.download(region, instant)
            except HycomError as e:
                failures += 1
                logger.error(f"{instant:%Y-%m-%dT%H:%MZ} skipped: {e.kind} after {e.attempts} attempt(s)")
            except Exception as e:
                # e.g. an unreadable file at the cache path or a full disk
                failures += 1
                logger.error(
                    f"{instant:%Y-%m-%dT%H:%MZ} skipped: {type(e).__name__} "
                    f"after {getattr(e, 'attempts', 1)} attempt(s): {e}"
                )

    logger.info(f"Finished: {len(instants) - failures}/{len(instants)} instants available")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
