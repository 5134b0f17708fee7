"""
The unit of work each virtual user repeats.

One iteration posts the configured JSON body to the profiler index,
classifies the response, and records the ``"status was 200"`` check.
Failures of any kind (non-200 status, refused connection, timeout) are
recorded against that iteration only; nothing is raised, so the virtual
user moves straight on to its next iteration.

Key Concepts Demonstrated:
- Locust's ``catch_response`` protocol for deciding pass/fail in-band
- A single transient outcome object per request, reduced to one check
- No retries: every request is counted exactly once
"""

from __future__ import annotations

import logging
import time
from typing import Any

from locust.clients import HttpSession

from pprof_load.checks import STATUS_OK_CHECK, CheckTally, RequestOutcome

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def post_and_check(
    client: HttpSession,
    *,
    path: str,
    payload: Any,
    checks: CheckTally,
    timeout: float | None = None,
) -> RequestOutcome:
    """
    POST *payload* to *path* and record whether the response was a 200.

    Args:
        client: The Locust HTTP session of the calling virtual user.
        path: Request path, resolved against the user's host.
        payload: JSON-serialisable request body.
        checks: Tally receiving the iteration's single check result.
        timeout: Optional per-request timeout in seconds.  ``None``
            keeps the client default.

    Returns:
        The iteration's :class:`RequestOutcome`.  Network failures are
        reported with ``status_code == 0`` and the error message.
    """
    request_kwargs: dict[str, Any] = {
        "json": payload,
        "headers": JSON_HEADERS,
        "name": f"{path} [POST]",
        "catch_response": True,
    }
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    started = time.perf_counter()
    with client.post(path, **request_kwargs) as response:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        error = getattr(response, "error", None)
        outcome = RequestOutcome(
            status_code=response.status_code or 0,
            elapsed_ms=elapsed_ms,
            error=str(error) if error else None,
        )

        if checks.record(STATUS_OK_CHECK, outcome.status_ok):
            response.success()
        else:
            response.failure(STATUS_OK_CHECK)
            logger.debug(
                "Check '%s' failed: status=%s error=%s",
                STATUS_OK_CHECK,
                outcome.status_code,
                outcome.error,
            )

    return outcome
