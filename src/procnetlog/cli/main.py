"""
Command-line interface for procnetlog.

Periodically samples the network statistics in /proc/net and sends them to
the system log for a bounded amount of time::

    procnetlog <update in seconds> <total runtime in seconds>

Examples:
    procnetlog 15 35      collect stats every 15 seconds, stop after 35 seconds
    procnetlog 30 14400   collect stats every 30 seconds, stop after 4 hours

Exit status is 0 whenever a run took place, however it ended (including a
forced kill of the loop at the hard limit), and 1 for invalid arguments,
configuration errors and failed preflight checks.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, NoReturn, Optional

from ..config import get_config, set_config_path
from ..config.validators import TRANSPORT_CHOICES
from ..models.config import RunConfig
from ..orchestration import ProcNetLogRunner
from ..system import PreflightChecker
from ..validation import ValidationError, handle_cli_error, validate_positive_integer

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

USAGE_EXAMPLES = """\
Examples:
procnetlog 15 35      collect stats every 15 seconds, stop after 35 seconds
procnetlog 30 14400   collect stats every 30 seconds, stop after 4 hours
"""


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors on stdout with exit code 1."""

    def error(self, message: str) -> NoReturn:
        print(f"FAILURE: missing/invalid options ({message})\n")
        self.print_usage(sys.stdout)
        print()
        print(USAGE_EXAMPLES)
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = UsageArgumentParser(
        prog="procnetlog",
        description="Periodically send the network statistics in /proc/net to syslog.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("interval", help="seconds between samples (positive integer)")
    parser.add_argument("total_runtime", help="seconds before the run is stopped (positive integer)")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="path to a config.toml overriding the built-in settings",
    )
    parser.add_argument(
        "--stats-dir",
        type=Path,
        help="statistics directory to sample instead of the configured one",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORT_CHOICES,
        help="syslog transport to use instead of the configured one",
    )
    parser.add_argument(
        "--skip-preflight",
        action="store_true",
        help="do not check the environment (distribution, syslog daemon) before running",
    )
    return parser


def parse_run_config(interval: str, total_runtime: str) -> RunConfig:
    """
    Validate the two positional arguments.

    Raises:
        ValidationError: If either value is not a positive integer
    """
    return RunConfig(
        interval=validate_positive_integer(interval, min_value=1, field_name="interval"),
        total_runtime=validate_positive_integer(total_runtime, min_value=1, field_name="total_runtime"),
    )


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for procnetlog.

    Raises:
        SystemExit: Always; 0 after a run, 1 on argument, configuration or
            preflight failures.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run_config = parse_run_config(args.interval, args.total_runtime)
    except ValidationError as e:
        handle_cli_error(error=e, context="argument validation", exit_code=1, logger=logger)

    if args.config:
        set_config_path(args.config)
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    logging.getLogger().setLevel(app_config.logging.level)

    # Overrides go on a copy; the cached configuration stays as loaded.
    if args.stats_dir:
        app_config = replace(app_config, sampling=replace(app_config.sampling, stats_dir=args.stats_dir))
    if args.transport:
        app_config = replace(app_config, forwarding=replace(app_config.forwarding, transport=args.transport))

    if app_config.preflight.enabled and not args.skip_preflight:
        report = PreflightChecker(app_config).run()
        report.log(logger)
        if not report.ok:
            names = ", ".join(r.name for r in report.failures)
            logger.error(f"Preflight checks failed ({names}); not starting. Use --skip-preflight to override.")
            sys.exit(1)

    logger.info(
        f"Collecting {app_config.sampling.stats_dir} every {run_config.interval}s "
        f"for {run_config.total_runtime}s"
    )
    try:
        outcome = ProcNetLogRunner(run_config, app_config).run()
        logger.info(f"Run finished ({outcome.value})")
    except Exception as e:
        logger.error(f"Run aborted: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main_cli()
