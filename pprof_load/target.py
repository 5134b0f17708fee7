"""
Stand-in target service.

A tiny Flask application that answers on ``/debug/pprof/`` with a
configurable status code.  Running it on port 8000 lets the load test
be exercised without the real service: status 200 reproduces the happy
path, 500 the "every check fails" scenario, and not starting it at all
the "target unreachable" one.

Usage::

    pprof-stub-target                       # 200 on every request
    STUB_TARGET_STATUS=500 pprof-stub-target
    STUB_TARGET_DELAY=1.5 pprof-stub-target   # slow answers
"""

from __future__ import annotations

import logging
import threading
import time

from flask import Blueprint, Flask, current_app, jsonify, request

from pprof_load.config import get_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

target_bp = Blueprint("pprof_target", __name__)


@target_bp.route("/debug/pprof/", methods=["GET", "POST"])
def profile_index():
    """Count the request, wait the configured delay, then answer with the configured status."""
    state = current_app.extensions["pprof_target"]
    with state["lock"]:
        state["hits"] += 1

    delay = current_app.config["STUB_TARGET_DELAY"]
    if delay > 0:
        time.sleep(delay)

    status = current_app.config["STUB_TARGET_STATUS"]
    body = request.get_json(silent=True)
    return jsonify({"status": status, "method": request.method, "received": body}), status


def hit_count(app: Flask) -> int:
    """Number of requests *app* has received on the profiler index."""
    return app.extensions["pprof_target"]["hits"]


def create_app(
    config_name: str | None = None,
    *,
    status: int | None = None,
    delay: float | None = None,
) -> Flask:
    """
    Construct the stand-in target application.

    Args:
        config_name: Optional environment key passed to ``get_config``.
        status: Overrides ``STUB_TARGET_STATUS`` for this instance, so
            tests can start one server per scenario.
        delay: Overrides ``STUB_TARGET_DELAY``, the seconds each request
            is held before the response is sent.

    Returns:
        A Flask application with the profiler-index route registered.
    """
    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if status is not None:
        app.config["STUB_TARGET_STATUS"] = status
    if delay is not None:
        app.config["STUB_TARGET_DELAY"] = delay
    app.extensions["pprof_target"] = {"hits": 0, "lock": threading.Lock()}

    logger.info(
        "Creating stand-in target with config %s, answering %s after %ss",
        config_class.__name__,
        app.config["STUB_TARGET_STATUS"],
        app.config["STUB_TARGET_DELAY"],
    )
    app.register_blueprint(target_bp)
    return app


def main() -> None:
    """Console entry point: serve the stand-in target on localhost."""
    app = create_app()
    app.run(host="127.0.0.1", port=app.config["STUB_TARGET_PORT"], threaded=True)


if __name__ == "__main__":
    main()
