"""
Ramping load shape for the pprof load test.

Defines :class:`RampShape`, a Locust ``LoadTestShape`` that walks the
configured schedule: ramp up, hold, ramp down.  Locust calls
:meth:`RampShape.tick` roughly once per second and adjusts the number
of running users to whatever it returns; returning ``None`` ends the
run.

Key Concepts Demonstrated:
- Declarative stages instead of ``--users`` / ``--spawn-rate`` flags
- Linear interpolation so the user count tracks a smooth ramp
- Schedule taken from configuration so CI can compress or stretch it
"""

from __future__ import annotations

import logging
from typing import Sequence

from locust import LoadTestShape

from pprof_load.config import get_config
from pprof_load.stages import Stage, spawn_rate, target_users, total_duration, validate_stages

logger = logging.getLogger(__name__)


class RampShape(LoadTestShape):
    """
    Three-phase virtual-user ramp driven by ``Config.STAGES``.

    Pass *stages* to override the configured schedule, e.g. in tests
    that need a run measured in seconds.

    Attributes:
        stages: The validated schedule this shape walks.
    """

    stages: tuple[Stage, ...]

    def __init__(self, stages: Sequence[Sequence[float]] | None = None) -> None:
        super().__init__()
        if stages is None:
            stages = get_config().STAGES
        self.stages = validate_stages(stages)
        logger.info(
            "Load shape: %d stages over %.0fs, peak %d users",
            len(self.stages),
            total_duration(self.stages),
            max(stage.target for stage in self.stages),
        )

    def tick(self) -> tuple[int, float] | None:
        """Return ``(user_count, spawn_rate)`` for now, or ``None`` when done."""
        run_time = self.get_run_time()
        users = target_users(self.stages, run_time)
        if users is None:
            return None
        return users, spawn_rate(self.stages, run_time)
