"""
Errors raised while handling an admission call
"""

from typing import Optional


class NamespaceBackupError(Exception):
    """Base class for all webhook errors"""


class ConfigurationError(NamespaceBackupError):
    """The webhook configuration is invalid"""


class DecodeError(NamespaceBackupError):
    """The admission request or one of its objects could not be decoded"""


class ExternalCallError(NamespaceBackupError):
    """
    A call against the Velero API failed

    Attributes:
        operation: What was attempted, e.g. 'create schedule'
        name: Name of the Velero object involved
        status: HTTP status returned by the API server, if any
    """

    def __init__(self, operation: str, name: str, reason: str, status: Optional[int] = None):
        super().__init__(f"Failed to {operation} {name}: {reason}")
        self.operation = operation
        self.name = name
        self.reason = reason
        self.status = status
