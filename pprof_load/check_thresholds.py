"""
Gate a finished run on its named-check pass rates.

When ``LOADTEST_CHECKS_REPORT`` is set, the locustfile writes the run's
check tally to that JSON file as the run stops.  CI then calls this
script, which compares every check listed under ``checks:`` in
:file:`thresholds.yml` with the minimum pass rate given there::

    checks:
      status was 200: 100.0

A check the run never evaluated counts as breached: a run that sent no
traffic must not look healthy.

Exit codes: ``0`` every check met its limit, ``1`` at least one did
not, ``2`` the report or thresholds could not be read.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NamedTuple, Sequence

import yaml

from pprof_load.checks import CheckTally, read_report

EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2

DEFAULT_THRESHOLDS = Path(__file__).with_name("thresholds.yml")


class Verdict(NamedTuple):
    """Outcome of comparing one check against its minimum pass rate."""

    check: str
    pass_rate_percent: float
    evaluations: int
    min_pass_rate_percent: float

    @property
    def passed(self) -> bool:
        return self.evaluations > 0 and self.pass_rate_percent >= self.min_pass_rate_percent


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fail the build when a named check's pass rate is below its limit."
    )
    parser.add_argument(
        "--report",
        required=True,
        type=Path,
        help="Check report JSON written at the end of the Locust run",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=DEFAULT_THRESHOLDS,
        help="YAML file mapping check names to minimum pass rates (percent)",
    )
    return parser.parse_args(argv)


def load_limits(path: Path) -> dict[str, float]:
    """
    Read the ``checks:`` mapping of check name to minimum pass rate.

    Raises:
        ValueError: If the mapping is missing or empty, or a limit is
            not a percentage between 0 and 100.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    checks = data.get("checks") if isinstance(data, dict) else None
    if not isinstance(checks, dict) or not checks:
        raise ValueError(f"{path} must define a non-empty 'checks' mapping")

    limits = {}
    for name, limit in checks.items():
        if isinstance(limit, bool) or not isinstance(limit, (int, float)):
            raise ValueError(f"Limit for check {name!r} must be a number, got {limit!r}")
        if not 0 <= limit <= 100:
            raise ValueError(f"Limit for check {name!r} must be within 0-100, got {limit}")
        limits[str(name)] = float(limit)
    return limits


def judge(tally: CheckTally, limits: dict[str, float]) -> list[Verdict]:
    """Compare each limited check in *tally* with its minimum pass rate."""
    verdicts = []
    for name, minimum in limits.items():
        result = tally.get(name)
        verdicts.append(Verdict(name, result.pass_rate * 100.0, result.total, minimum))
    return verdicts


def report_lines(verdicts: Sequence[Verdict]) -> list[str]:
    """Render verdicts as one line each plus an overall line."""
    lines = []
    for verdict in verdicts:
        mark = "PASS" if verdict.passed else "FAIL"
        lines.append(
            f"{mark} {verdict.check}: {verdict.pass_rate_percent:.2f}% "
            f"of {verdict.evaluations} (minimum {verdict.min_pass_rate_percent:.2f}%)"
        )
    overall = all(verdict.passed for verdict in verdicts)
    lines.append(f"Overall: {'PASS' if overall else 'FAIL'}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        limits = load_limits(args.thresholds)
        tally = read_report(args.report)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Threshold check failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    verdicts = judge(tally, limits)
    for line in report_lines(verdicts):
        print(line)
    return EXIT_PASS if all(verdict.passed for verdict in verdicts) else EXIT_THRESHOLD_BREACH


if __name__ == "__main__":
    raise SystemExit(main())
