"""Consistency mode for the Redis fixed-window backend.

The fixed-window algorithm needs two store operations: increment the counter
and, when that increment created the key, set the key's expiry.

Modes:
    NON_ATOMIC: INCRBY and PEXPIRE are separate round trips. Increments are
        still atomic (no lost updates), but a crash or delay between the two
        steps can leave a key without expiry (it never resets on its own) or
        with a late one. This is the default and matches the behaviour most
        deployments run today.
    ATOMIC: Both steps run inside one server-side Lua script, so the key can
        never exist without its window expiry.
"""

from enum import Enum


class ConsistencyMode(str, Enum):
    """Increment/expire sequencing for the Redis backend."""

    NON_ATOMIC = "non_atomic"
    ATOMIC = "atomic"
