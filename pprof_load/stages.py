"""
Virtual-user schedule primitives.

A schedule is an ordered tuple of :class:`Stage` values.  Each stage
moves the active user count linearly from the previous stage's target
(``0`` for the first stage) to its own target over its duration.  The
helpers here are pure so the arithmetic can be checked without a
Locust runner.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple, Sequence

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")

_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class Stage(NamedTuple):
    """One schedule segment: reach ``target`` users over ``duration`` seconds."""

    duration: float
    target: int


def parse_duration(text: str) -> float:
    """
    Convert a duration such as ``"1m"``, ``"90s"`` or ``"1m30s"`` to seconds.

    A bare number is read as seconds.

    Raises:
        ValueError: If *text* is empty or contains an unknown unit.
    """
    value = text.strip()
    if not value:
        raise ValueError("Empty duration")

    try:
        return float(value)
    except ValueError:
        pass

    position = 0
    seconds = 0.0
    for match in _DURATION_PART.finditer(value):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(value):
        raise ValueError(f"Invalid duration: {text!r}")
    return seconds


def parse_stages(text: str) -> tuple[Stage, ...]:
    """
    Parse compact stage notation, e.g. ``"1m:100,3m:100,1m:0"``.

    Args:
        text: Comma-separated ``<duration>:<target>`` pairs.

    Returns:
        The validated schedule.

    Raises:
        ValueError: On malformed pairs, non-integer targets, or any
            violation reported by :func:`validate_stages`.
    """
    stages = []
    for chunk in text.split(","):
        if not chunk.strip():
            continue
        duration_text, sep, target_text = chunk.partition(":")
        if not sep:
            raise ValueError(f"Stage must look like '<duration>:<target>', got {chunk!r}")
        try:
            target = int(target_text.strip())
        except ValueError as exc:
            raise ValueError(f"Stage target must be an integer, got {target_text!r}") from exc
        stages.append(Stage(parse_duration(duration_text), target))

    return validate_stages(stages)


def validate_stages(stages: Sequence[Sequence[float]]) -> tuple[Stage, ...]:
    """
    Check a schedule and normalise it to a tuple of :class:`Stage`.

    Raises:
        ValueError: If the schedule is empty, a duration is not positive,
            or a target is negative.
    """
    normalised = tuple(Stage(float(duration), int(target)) for duration, target in stages)
    if not normalised:
        raise ValueError("At least one stage is required")

    for index, stage in enumerate(normalised):
        if stage.duration <= 0:
            raise ValueError(f"Stage {index} duration must be positive, got {stage.duration}")
        if stage.target < 0:
            raise ValueError(f"Stage {index} target must be non-negative, got {stage.target}")
    return normalised


def total_duration(stages: Sequence[Stage]) -> float:
    """Sum of all stage durations, in seconds."""
    return sum(stage.duration for stage in stages)


def _locate(stages: Sequence[Stage], run_time: float) -> tuple[int, float, float] | None:
    """Return ``(index, start_users, elapsed_in_stage)`` or ``None`` past the end."""
    start_users = 0
    stage_start = 0.0
    for index, stage in enumerate(stages):
        stage_end = stage_start + stage.duration
        if run_time < stage_end:
            return index, start_users, run_time - stage_start
        start_users = stage.target
        stage_start = stage_end
    return None


def target_users(stages: Sequence[Stage], run_time: float) -> int | None:
    """
    Number of users that should be active *run_time* seconds into the run.

    Returns ``None`` once the schedule is exhausted.  At exactly the end
    of the last stage the final target is returned, so a schedule ending
    in ``0`` reports zero users before stopping.
    """
    if run_time < 0:
        run_time = 0.0

    located = _locate(stages, run_time)
    if located is None:
        if stages and math.isclose(run_time, total_duration(stages)):
            return stages[-1].target
        return None

    index, start_users, elapsed = located
    stage = stages[index]
    progress = elapsed / stage.duration
    return int(round(start_users + (stage.target - start_users) * progress))


def spawn_rate(stages: Sequence[Stage], run_time: float) -> float:
    """
    Users per second Locust should start or stop during the current stage.

    This is the stage's slope, floored at ``1`` so a hold stage can still
    replace users quickly.
    """
    located = _locate(stages, max(run_time, 0.0))
    if located is None:
        return 1.0

    index, start_users, _ = located
    stage = stages[index]
    return max(abs(stage.target - start_users) / stage.duration, 1.0)
