"""
Core utilities shared across the WorkInfo API.

This package hosts configuration, logging setup, password hashing, CSRF and
rate limit helpers, and the route guards used by routers. Services depend on
these primitives instead of reading the environment or request state directly.
"""
