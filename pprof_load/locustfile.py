# ruff: noqa: E402
"""
Locust entrypoint for the pprof load test.

This is the file that the ``locust`` CLI discovers and loads.  It
declares the single virtual-user class, exposes :class:`RampShape` so
Locust drives the user count from the configured stages, and wires up
event listeners that log the run parameters and the end-of-run check
summary.

Usage examples::

    # Default schedule (0 -> 100 users over 1m, hold 3m, 100 -> 0 over 1m):
    locust -f pprof_load/locustfile.py --headless

    # Same run, saving the check tally and gating on it:
    LOADTEST_CHECKS_REPORT=results/checks.json \
        locust -f pprof_load/locustfile.py --headless
    pprof-check-thresholds --report results/checks.json

    # Point at another server:
    locust -f pprof_load/locustfile.py --headless --host http://staging:8000

Key Concepts Demonstrated:
- ``LoadTestShape`` instead of fixed ``--users`` for staged ramps
- Zero think-time users that loop the workload back-to-back
- ``events.init`` / ``test_start`` / ``test_stop`` hooks for run logging
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from locust import HttpUser, constant, events, task

# Locust may be invoked from any directory.  Inserting the project root
# onto ``sys.path`` guarantees ``pprof_load`` imports resolve even when
# the package has not been installed.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pprof_load.checks import log_summary, tally_for, write_report
from pprof_load.config import get_config
from pprof_load.shape import RampShape
from pprof_load.workload import post_and_check

__all__ = ["PprofTargetUser", "RampShape"]

logger = logging.getLogger(__name__)

settings = get_config()


class PprofTargetUser(HttpUser):
    """
    Virtual user that posts to the profiler index as fast as it can.

    There is no think-time: each iteration starts as soon as the previous
    response (or error) arrives.  A failed iteration is recorded and the
    loop simply continues.
    """

    host = settings.TARGET_HOST
    wait_time = constant(0)

    @task
    def post_profile_index(self) -> None:
        """Send one POST and record the ``status was 200`` check."""
        post_and_check(
            self.client,
            path=settings.TARGET_PATH,
            payload=settings.PAYLOAD,
            checks=tally_for(self.environment),
            timeout=settings.REQUEST_TIMEOUT,
        )


@events.init.add_listener
def _log_run_parameters(environment, **_kwargs):
    """Log where traffic is going and which schedule drives it."""
    shape = environment.shape_class
    stages = getattr(shape, "stages", settings.STAGES)
    logger.info(
        "Target %s%s, stages %s",
        environment.host or settings.TARGET_HOST,
        settings.TARGET_PATH,
        ", ".join(f"{stage.duration:g}s->{stage.target}" for stage in stages),
    )


@events.init.add_listener
def apply_graceful_stop(environment, **_kwargs):
    """
    Let retiring users finish their in-flight request.

    Locust kills users outright when ``stop_timeout`` is unset, which
    drops the outcome and check of any request still in the air during
    ramp-down.  An explicit ``--stop-timeout`` is left untouched.
    """
    if not environment.stop_timeout:
        environment.stop_timeout = settings.STOP_TIMEOUT


@events.test_start.add_listener
def _reset_checks(environment, **_kwargs):
    """Start each run with empty check counters."""
    tally_for(environment).reset()


@events.test_stop.add_listener
def _report_checks(environment, **_kwargs):
    """Log the pass rate of every check once the run ends, and save it if asked."""
    tally = tally_for(environment)
    log_summary(tally)
    if settings.CHECKS_REPORT:
        write_report(tally, Path(settings.CHECKS_REPORT))
