"""
Domain package for querydesk.

Exports the backend tag, the value model and the connection-string classifier.
Keep this package free of I/O.
"""

from querydesk.domain.classifier import detect_kind, redact_conn_string
from querydesk.domain.models import BackendKind, ConnectionInfo, Row, Value

__all__ = [
    "BackendKind",
    "ConnectionInfo",
    "Row",
    "Value",
    "detect_kind",
    "redact_conn_string",
]
