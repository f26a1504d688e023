#!/usr/bin/env python3
"""Manual smoke test: replay the sample walk and print each cycle."""

from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core.app import ReplayConfig, run_replay


def main() -> None:
    results = run_replay(ReplayConfig(path=Path(__file__).with_name("sample_walk.yaml")), config={})
    for index, result in enumerate(results):
        labels = ", ".join(f"{item.label}/{item.status.value}" for item in result.detections)
        said = result.directive.text if result.directive else "-"
        state = f"skipped ({result.reason})" if result.skipped else labels or "empty"
        print(f"#{index} next={result.interval_ms}ms {state} -> {said}")


if __name__ == "__main__":
    main()
