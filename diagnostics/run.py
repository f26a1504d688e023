"""Command-line entry point for running diagnostics."""

from __future__ import annotations

import argparse
from pathlib import Path
import tempfile

from config.diagnostics import probe as config_probe
from core.diagnostics import probe as core_probe
from diagnostics.runner import exit_code, format_results, run_diagnostics
from vision.diagnostics import probe as vision_probe


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Run perception diagnostics probes.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run probes against a temporary config directory and built-in defaults.",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Optional base directory holding config/.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run diagnostics and return an exit code."""

    args = parse_args(argv)
    base_dir = args.base_dir

    if args.offline and base_dir is None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_base = Path(tmp_dir)
            config_dir = tmp_base / "config"
            config_dir.mkdir(parents=True, exist_ok=True)
            (config_dir / "default.yaml").write_text("{}", encoding="utf-8")

            results = run_diagnostics(
                [
                    lambda: config_probe(base_dir=tmp_base),
                    core_probe,
                    lambda: vision_probe(config={}),
                ]
            )
    else:
        results = run_diagnostics(
            [
                lambda: config_probe(base_dir=base_dir),
                core_probe,
                vision_probe,
            ]
        )

    print(format_results(results))

    return exit_code(results)


if __name__ == "__main__":
    raise SystemExit(main())
