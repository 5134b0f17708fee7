"""
pprof load test (Locust-based).

Drives a ramping population of virtual users that POST a JSON body to
the service's profiler index (``/debug/pprof/``) and records, per
request, whether the response was a 200.

Key Concepts Demonstrated:
- Staged ramp-up / hold / ramp-down via a Locust ``LoadTestShape``
- Named per-iteration checks with an end-of-run pass-rate summary
- CSV-based threshold gate for automated pass/fail decisions
- A stand-in Flask target for reproducing pass, fail and unreachable runs
"""
