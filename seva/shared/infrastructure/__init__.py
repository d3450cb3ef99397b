"""
Infrastructure Layer
=====================

Low-level technical concerns:
- Logging setup
- Change feed for live subscribers
- Metrics export
"""

from seva.shared.infrastructure.events import ChangeFeed
from seva.shared.infrastructure.logging import get_logger, setup_logging

__all__ = ["ChangeFeed", "get_logger", "setup_logging"]
