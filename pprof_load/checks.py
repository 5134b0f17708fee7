"""
Named pass/fail checks recorded per iteration.

Locust counts request failures on its own, but a *check* is a separate,
named assertion ("status was 200") whose pass rate is reported at the
end of a run.  This module holds the transient :class:`RequestOutcome`
produced by each workload iteration and the per-run :class:`CheckTally`
that accumulates check results.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from weakref import WeakKeyDictionary

logger = logging.getLogger(__name__)

STATUS_OK_CHECK = "status was 200"


@dataclass(frozen=True)
class RequestOutcome:
    """
    Result of one workload iteration.

    Attributes:
        status_code: HTTP status, or ``0`` when no response arrived.
        elapsed_ms: Wall-clock time spent on the request.
        error: Transport error message for network failures, else ``None``.
    """

    status_code: int
    elapsed_ms: float
    error: str | None = None

    @property
    def status_ok(self) -> bool:
        return self.status_code == 200


@dataclass
class CheckResult:
    """Running pass/fail counters for one named check."""

    passes: int = 0
    fails: int = 0

    @property
    def total(self) -> int:
        return self.passes + self.fails

    @property
    def pass_rate(self) -> float:
        """Fraction of passing evaluations, ``0.0`` when nothing was recorded."""
        if self.total == 0:
            return 0.0
        return self.passes / self.total


@dataclass
class CheckTally:
    """Check results for a single Locust run, keyed by check name."""

    results: dict[str, CheckResult] = field(default_factory=dict)

    def record(self, name: str, passed: bool) -> bool:
        """Count one evaluation of *name* and return *passed* unchanged."""
        result = self.results.setdefault(name, CheckResult())
        if passed:
            result.passes += 1
        else:
            result.fails += 1
        return passed

    def get(self, name: str) -> CheckResult:
        return self.results.get(name, CheckResult())

    def reset(self) -> None:
        self.results.clear()

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            name: {"passes": result.passes, "fails": result.fails}
            for name, result in self.results.items()
        }

    @classmethod
    def from_dict(cls, data: Any) -> CheckTally:
        """
        Rebuild a tally from :meth:`to_dict` output.

        Raises:
            ValueError: If *data* is not a mapping of check names to
                non-negative ``passes`` / ``fails`` counts.
        """
        if not isinstance(data, dict):
            raise ValueError("Check report must be a JSON object keyed by check name")

        tally = cls()
        for name, counts in data.items():
            try:
                passes = int(counts["passes"])
                fails = int(counts["fails"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Check {name!r} needs integer passes and fails") from exc
            if passes < 0 or fails < 0:
                raise ValueError(f"Check {name!r} has negative counts")
            tally.results[name] = CheckResult(passes=passes, fails=fails)
        return tally

    def summary_lines(self) -> list[str]:
        """One line per check: mark, name, pass percentage and counts."""
        lines = []
        for name, result in self.results.items():
            mark = "PASS" if result.fails == 0 else "FAIL"
            lines.append(
                f"{mark} {name}: {result.pass_rate * 100:.2f}% "
                f"({result.passes} passed / {result.fails} failed)"
            )
        return lines


_tallies: WeakKeyDictionary[Any, CheckTally] = WeakKeyDictionary()


def tally_for(environment: Any) -> CheckTally:
    """
    Return the tally belonging to a Locust environment, creating it on first use.

    Each ``Environment`` gets its own tally so that back-to-back runs in
    one process (as the test suite does) never share counters.  Tallies
    are held weakly and disappear with their environment.
    """
    tally = _tallies.get(environment)
    if tally is None:
        tally = _tallies[environment] = CheckTally()
    return tally


def write_report(tally: CheckTally, path: Path) -> None:
    """Dump the tally as JSON so a later step can gate on it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(tally.to_dict(), handle, indent=2)
    logger.info("Check report written to %s", path)


def read_report(path: Path) -> CheckTally:
    """Load a tally previously written by :func:`write_report`."""
    with path.open("r", encoding="utf-8") as handle:
        return CheckTally.from_dict(json.load(handle))


def log_summary(tally: CheckTally) -> None:
    """Write the per-check summary to the log at the end of a run."""
    if not tally.results:
        logger.info("No checks were recorded")
        return
    for line in tally.summary_lines():
        logger.info("Check %s", line)
