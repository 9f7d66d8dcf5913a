import argparse
import logging
from pathlib import Path
from typing import Optional

from uvdash.cli.commands.show import handle as handle_show
from uvdash.cli.commands.watch import handle as handle_watch
from uvdash.config.resolution import cascade, resolve_log_level
from uvdash.config.settings import load_config, validate_zipcode


def _zipcode_arg(value: str) -> str:
    try:
        return validate_zipcode(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--zip", "-z",
        dest="zipcode",
        type=_zipcode_arg,
        default=None,
        help="5-digit zip code (default: resolve --lat/--lng, else config default_zipcode)",
    )
    parser.add_argument("--lat", type=float, default=None, help="latitude of the user location")
    parser.add_argument("--lng", type=float, default=None, help="longitude of the user location")


def build_parser() -> argparse.ArgumentParser:
    # Common options shared by top-level and subcommands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=argparse.SUPPRESS,
        help="set logging level (default: config log_level, else WARNING)",
    )
    common.add_argument(
        "--config",
        "-c",
        default=argparse.SUPPRESS,
        help="path to uvdash.yaml (default: nearest uvdash.yaml upward from cwd)",
    )

    parser = argparse.ArgumentParser(
        prog="uvdash",
        description="Hourly UV index forecast with sunrise/sunset for your location.",
        parents=[common],
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_show = sub.add_parser(
        "show",
        help="fetch once and print the UV series",
        parents=[common],
    )
    _add_location_args(p_show)
    p_show.add_argument(
        "--json",
        action="store_true",
        help="print the canonical series as JSON instead of a table",
    )

    p_watch = sub.add_parser(
        "watch",
        help="keep the UV series on screen, refreshing when stale",
        parents=[common],
    )
    _add_location_args(p_watch)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config_arg = getattr(args, "config", None)
    config_path = Path(config_arg) if config_arg else None
    context = load_config(config_path)
    config = context.config

    level = resolve_log_level(getattr(args, "log_level", None), config.log_level, fallback="WARNING")
    logging.basicConfig(level=level.value, format="%(message)s")
    logger = logging.getLogger(__name__)
    logger.debug("Log level %s (from %s)", level.name, level.source)
    if context.file_path is not None:
        logger.debug("Using config %s", context.file_path)

    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")
    zipcode = cascade(
        args.zipcode,
        None if args.lat is not None else config.default_zipcode,
    )

    if args.cmd == "show":
        code = handle_show(
            config=config,
            zipcode=zipcode,
            lat=args.lat,
            lng=args.lng,
            as_json=args.json,
        )
    else:
        code = handle_watch(
            config=config,
            zipcode=zipcode,
            lat=args.lat,
            lng=args.lng,
        )
    if code:
        raise SystemExit(code)
