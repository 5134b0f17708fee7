"""
Load test configuration.

Defines environment-specific configuration classes for the pprof load
test.  Each class captures where the traffic goes (host, path, body),
how long requests may take, and the virtual-user schedule.  The
``get_config`` factory selects the right class based on the
``LOADTEST_ENV`` environment variable (or an explicit key).

Key Concepts Demonstrated:
- Class-based configuration with inheritance for DRY defaults
- Environment-variable overrides so CI can retarget a run without edits
- Separate testing configuration with a compressed, seconds-long schedule
"""

from __future__ import annotations

import json
import os
from typing import Any

from pprof_load.stages import Stage, parse_duration, parse_stages


def _json_env(name: str, default: str) -> Any:
    """Decode a JSON document from an environment variable."""
    raw = os.environ.get(name, default)
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be valid JSON, got {raw!r}") from exc


def _timeout_env(name: str) -> float | None:
    """Read an optional request timeout in seconds; unset means engine default."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc


class Config:
    """
    Base (shared) configuration for the load test.

    All environment-specific classes inherit from ``Config`` so that
    common defaults only need to be stated once.  The defaults
    reproduce the original run: 100 users against the local profiler
    index for five minutes.
    """

    # Base URL of the system under test.  Locust's ``--host`` flag still
    # takes precedence when given on the command line.
    TARGET_HOST: str = os.environ.get("LOADTEST_TARGET_HOST", "http://localhost:8000")

    TARGET_PATH: str = os.environ.get("LOADTEST_TARGET_PATH", "/debug/pprof/")

    # Placeholder body.  The endpoint's real payload shape is unknown,
    # so only the empty object is sent unless overridden.
    PAYLOAD: Any = _json_env("LOADTEST_PAYLOAD", "{}")

    # ``None`` leaves the HTTP client's own timeout behaviour in place.
    REQUEST_TIMEOUT: float | None = _timeout_env("LOADTEST_REQUEST_TIMEOUT")

    # Ramp to 100 over a minute, hold for three, ramp back down.
    STAGES: tuple[Stage, ...] = parse_stages(
        os.environ.get("LOADTEST_STAGES", "1m:100,3m:100,1m:0")
    )

    # Seconds a retiring user may spend finishing its in-flight request
    # during ramp-down and at the end of the run.  Applied only when
    # Locust's own ``--stop-timeout`` was not given.
    STOP_TIMEOUT: float = parse_duration(os.environ.get("LOADTEST_STOP_TIMEOUT", "30s"))

    # Where the per-check tally is written at the end of a run; empty
    # disables the report.
    CHECKS_REPORT: str = os.environ.get("LOADTEST_CHECKS_REPORT", "")

    # Stand-in target: the status every request receives, how long it
    # takes to answer, and where it listens.
    STUB_TARGET_STATUS: int = int(os.environ.get("STUB_TARGET_STATUS", "200"))
    STUB_TARGET_DELAY: float = float(os.environ.get("STUB_TARGET_DELAY", "0"))
    STUB_TARGET_PORT: int = int(os.environ.get("STUB_TARGET_PORT", "8000"))


class DevelopmentConfig(Config):
    """Local runs against a developer's own server; uses the defaults."""


class TestingConfig(Config):
    """
    Test-suite overrides.

    Points the host at a non-routable test name so that unit tests never
    accidentally hit a real server, and squeezes the schedule into a
    few seconds so shape-driven runs finish quickly.
    """

    TARGET_HOST: str = os.environ.get("TEST_TARGET_HOST", "http://pprof.test")
    REQUEST_TIMEOUT: float | None = 2.0
    STOP_TIMEOUT: float = 5.0
    STAGES: tuple[Stage, ...] = parse_stages(
        os.environ.get("TEST_LOADTEST_STAGES", "1s:4,1s:4,1s:0")
    )


class ProductionConfig(Config):
    """
    Runs against a deployed environment.

    All values are expected to come from environment variables set by
    the CI job; nothing here differs from the base defaults.
    """


# Lookup table mapping environment name strings to their config classes.
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Return the configuration class for the given environment.

    Args:
        env: One of ``"development"``, ``"testing"``, or
            ``"production"``.  When *None*, the ``LOADTEST_ENV``
            environment variable is consulted, falling back to
            ``"development"`` if unset.

    Returns:
        The ``Config`` subclass matching the requested environment,
        or ``DevelopmentConfig`` if the key is unrecognised.
    """
    if env is None:
        env = os.environ.get("LOADTEST_ENV", "development")
    return config.get(env, config["default"])
