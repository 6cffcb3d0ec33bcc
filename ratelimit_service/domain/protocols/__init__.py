"""Domain protocols (ports).

Infrastructure adapters implement these structurally (PEP 544); they do not
inherit from them.
"""

from ratelimit_service.domain.protocols.logger_protocol import LoggerProtocol
from ratelimit_service.domain.protocols.rate_limit_storage_protocol import (
    RateLimitStorageProtocol,
)

__all__ = ["LoggerProtocol", "RateLimitStorageProtocol"]
