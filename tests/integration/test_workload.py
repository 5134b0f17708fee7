"""
Integration tests for a single workload iteration.

Each test drives one ``PprofTargetUser`` iteration against a live
stand-in target (or a closed port) and inspects three things: the
returned outcome, the ``status was 200`` check tally, and the request
statistics Locust recorded.

Key SDET Concepts Demonstrated:
- Real HTTP against a throwaway server instead of mocked responses
- Negative-path testing for server errors and connection failures
- Asserting "exactly one request, exactly one check" per iteration
"""

from __future__ import annotations

import pytest

from pprof_load.checks import STATUS_OK_CHECK, tally_for
from pprof_load.locustfile import PprofTargetUser
from pprof_load.workload import post_and_check

pytestmark = pytest.mark.integration


def test_200_passes_check(stub_target, locust_env_factory):
    """Test that a 200 response is a passed check and a successful request."""
    # Arrange
    env = locust_env_factory(stub_target(200).url)
    user = PprofTargetUser(env)
    checks = tally_for(env)

    # Act
    outcome = post_and_check(user.client, path="/debug/pprof/", payload={}, checks=checks)

    # Assert
    assert outcome.status_code == 200
    assert outcome.status_ok
    assert outcome.error is None
    assert outcome.elapsed_ms >= 0
    assert (checks.get(STATUS_OK_CHECK).passes, checks.get(STATUS_OK_CHECK).fails) == (1, 0)
    assert env.stats.total.num_requests == 1
    assert env.stats.total.num_failures == 0


def test_500_fails_check_without_raising(stub_target, locust_env_factory):
    """Test that a server error is recorded as one failed check, not an exception."""
    env = locust_env_factory(stub_target(500).url)
    user = PprofTargetUser(env)
    checks = tally_for(env)

    outcome = post_and_check(user.client, path="/debug/pprof/", payload={}, checks=checks)

    assert outcome.status_code == 500
    assert not outcome.status_ok
    assert checks.get(STATUS_OK_CHECK).fails == 1
    assert env.stats.total.num_requests == 1
    assert env.stats.total.num_failures == 1


def test_unreachable_target_records_network_failure(unreachable_url, locust_env_factory):
    """Test that a refused connection becomes status 0 and a failed check."""
    env = locust_env_factory(unreachable_url)
    user = PprofTargetUser(env)
    checks = tally_for(env)

    outcome = post_and_check(
        user.client, path="/debug/pprof/", payload={}, checks=checks, timeout=2
    )

    assert outcome.status_code == 0
    assert outcome.error
    assert checks.get(STATUS_OK_CHECK).fails == 1
    assert env.stats.total.num_failures == 1


def test_user_task_runs_one_iteration_per_call(stub_target, locust_env_factory):
    """Test that each task invocation yields exactly one request and one check."""
    # Arrange
    env = locust_env_factory(stub_target(200).url)
    user = PprofTargetUser(env)

    # Act
    for _ in range(3):
        user.post_profile_index()

    # Assert
    check = tally_for(env).get(STATUS_OK_CHECK)
    assert check.total == 3
    assert check.passes == 3
    assert env.stats.total.num_requests == 3
    assert env.stats.get("/debug/pprof/ [POST]", "POST").num_requests == 3


def test_request_sends_empty_json_object(stub_target, locust_env_factory):
    """Test the wire format: JSON content type and an empty-object body."""
    env = locust_env_factory(stub_target(200).url)
    user = PprofTargetUser(env)
    captured = {}

    def _capture(**kwargs):
        captured.update(kwargs)

    env.events.request.add_listener(_capture)

    post_and_check(user.client, path="/debug/pprof/", payload={}, checks=tally_for(env))

    response = captured["response"]
    assert response.request.headers["Content-Type"] == "application/json"
    assert response.request.body in (b"{}", "{}")
    assert response.json()["received"] == {}
