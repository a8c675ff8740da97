"""Upstream completion provider integration.

This package is intentionally small:
- No prompt/output logging (conversations are user content).
- Configurable via environment variables.
- Treated as a stateless function by callers.
"""
