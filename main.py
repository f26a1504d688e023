"""Command-line entry point for the perception runtime."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from config import ConfigController
from core.app import ReplayConfig, run_replay
from core.logging import enable_file_logging, logger, set_level


def configure_logging(level_name: str) -> None:
    """Configure application logging."""

    level = logging._nameToLevel.get(level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    set_level(level_name)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Turn recorded object detections into prioritized spoken alerts."
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        help="YAML file of recorded per-frame detections to replay.",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Honor sampler intervals in wall-clock time while replaying.",
    )
    parser.add_argument(
        "--min-step-ms",
        type=int,
        default=100,
        help="Smallest simulated time step between replayed frames.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    config = ConfigController.get_instance().get_config()
    configure_logging(config.get("logging_level", "INFO"))
    args = parse_args(argv)

    if args.diagnostics:
        from config.diagnostics import probe as config_probe
        from core.diagnostics import probe as core_probe
        from diagnostics.runner import exit_code, format_results, run_diagnostics
        from vision.diagnostics import probe as vision_probe

        results = run_diagnostics([config_probe, core_probe, vision_probe])
        print(format_results(results))
        return exit_code(results)

    if config.get("file_logging_enabled", False):
        log_file_path = Path(config.get("log_file_path", "logs/pyvisioncue.log"))
        enable_file_logging(log_file_path)
        logger.info("Writing logs to %s", log_file_path)

    if args.replay is None:
        logger.error("Nothing to do: pass --replay FILE or --diagnostics")
        return 2

    try:
        results = run_replay(
            ReplayConfig(path=args.replay, realtime=args.realtime, min_step_ms=args.min_step_ms),
            config,
        )
    except (OSError, ValueError) as exc:
        logger.error("Replay failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Program terminated by user")
        return 0

    announced = sum(1 for result in results if result.directive is not None)
    skipped = sum(1 for result in results if result.skipped)
    logger.info("Replayed %s cycles: %s alerts, %s skipped", len(results), announced, skipped)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
