"""
Integration tests against a live stand-in target.

Tests start a throwaway Flask server per scenario (200, 500, or nothing
listening) and drive the real Locust user class at it.
"""
