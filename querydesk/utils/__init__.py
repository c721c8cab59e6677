"""
Utilities package for querydesk.

Cross-cutting helpers only; keep this package free of backend-specific logic.
"""

from querydesk.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
