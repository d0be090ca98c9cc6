"""
Namespace Backup Webhook for Kubernetes

This admission webhook watches Namespace create, update and delete
operations. Namespaces labelled for backup get a Velero Schedule and an
immediate Velero Backup; the Schedule is removed again when the labels go
away or the namespace is deleted.
"""

__version__ = "0.1.0"

# Import main components for easier access
from namespace_backup.config import WebhookConfig, get_config, set_config
from namespace_backup.decision import DeleteSchedule, EnsureScheduleAndBackup, decide
from namespace_backup.exceptions import (
    ConfigurationError,
    DecodeError,
    ExternalCallError,
    NamespaceBackupError
)
from namespace_backup.executor import ActionExecutor
from namespace_backup.labels import ResourceLabelView, evaluate
from namespace_backup.parser import OperationRecord, build_operation_record
from namespace_backup.templates import ManifestTemplates

__all__ = [
    'WebhookConfig',
    'get_config',
    'set_config',
    'decide',
    'EnsureScheduleAndBackup',
    'DeleteSchedule',
    'ActionExecutor',
    'evaluate',
    'ResourceLabelView',
    'OperationRecord',
    'build_operation_record',
    'ManifestTemplates',
    'NamespaceBackupError',
    'ConfigurationError',
    'DecodeError',
    'ExternalCallError',
]
