"""
Test suite for the pprof load test.

This package contains:
- unit/: schedule arithmetic, checks, configuration and the CI gate
- integration/: live HTTP against the stand-in target, single
  iterations and compressed end-to-end ramp runs
"""
