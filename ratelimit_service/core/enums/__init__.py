"""Core enums package.

Usage:
    from ratelimit_service.core.enums import ErrorCode, Environment
"""

from ratelimit_service.core.enums.environment import Environment
from ratelimit_service.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]
