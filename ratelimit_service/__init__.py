"""Distributed rate limiter service.

Per-key consumption limits ("allow N cost-units per key per time window")
shared across concurrent and distributed callers.
"""
