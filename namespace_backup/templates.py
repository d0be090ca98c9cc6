import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from namespace_backup.config import WebhookConfig

BACKUP_TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'

# Same alphabet and length as Kubernetes generateName suffixes
BACKUP_SUFFIX_ALPHABET = 'bcdfghjklmnpqrstvwxz2456789'
BACKUP_SUFFIX_LENGTH = 5


def random_suffix() -> str:
    return ''.join(secrets.choice(BACKUP_SUFFIX_ALPHABET) for _ in range(BACKUP_SUFFIX_LENGTH))


@dataclass
class ScheduleManifest:
    """
    Velero Schedule for one enrolled namespace
    """
    name: str
    namespace: str
    api_version: str
    schedule: str
    included_namespaces: List[str]
    ttl: str
    csi_snapshot_timeout: str
    storage_location: str
    default_volumes_to_fs_backup: bool = True
    use_owner_references_in_backup: bool = False
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'apiVersion': self.api_version,
            'kind': 'Schedule',
            'metadata': {
                'name': self.name,
                'namespace': self.namespace,
                'labels': dict(self.labels),
            },
            'spec': {
                'schedule': self.schedule,
                'useOwnerReferencesInBackup': self.use_owner_references_in_backup,
                'template': {
                    'csiSnapshotTimeout': self.csi_snapshot_timeout,
                    'includedNamespaces': list(self.included_namespaces),
                    'storageLocation': self.storage_location,
                    'ttl': self.ttl,
                    'defaultVolumesToFsBackup': self.default_volumes_to_fs_backup,
                },
            },
        }


@dataclass
class BackupManifest:
    """
    One-shot Velero Backup taken when a namespace gets enrolled
    """
    name: str
    namespace: str
    api_version: str
    included_namespaces: List[str]
    ttl: str
    csi_snapshot_timeout: str
    item_operation_timeout: str
    storage_location: str
    default_volumes_to_fs_backup: bool = True
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'apiVersion': self.api_version,
            'kind': 'Backup',
            'metadata': {
                'name': self.name,
                'namespace': self.namespace,
                'labels': dict(self.labels),
            },
            'spec': {
                'csiSnapshotTimeout': self.csi_snapshot_timeout,
                'itemOperationTimeout': self.item_operation_timeout,
                'includedNamespaces': list(self.included_namespaces),
                'storageLocation': self.storage_location,
                'ttl': self.ttl,
                'defaultVolumesToFsBackup': self.default_volumes_to_fs_backup,
            },
        }


class ManifestTemplates:
    """
    Builders for the Velero objects managed by the webhook
    """

    @staticmethod
    def _labels(config: WebhookConfig, target_name: str, namespace_name: str) -> Dict[str, str]:
        return {
            'app.kubernetes.io/managed-by': config.name,
            'namespace-backup/target': target_name,
            'namespace-backup/namespace': namespace_name,
        }

    @staticmethod
    def schedule_manifest(config: WebhookConfig, target_name: str, namespace_name: str) -> ScheduleManifest:
        """
        Generate the Schedule for a namespace
        """
        velero = config.velero
        return ScheduleManifest(
            name=config.schedule_name(target_name, namespace_name),
            namespace=velero.namespace,
            api_version=config.api_version,
            schedule=velero.schedule,
            included_namespaces=[namespace_name],
            ttl=velero.ttl,
            csi_snapshot_timeout=velero.csi_snapshot_timeout,
            storage_location=velero.storage_location,
            default_volumes_to_fs_backup=velero.default_volumes_to_fs_backup,
            use_owner_references_in_backup=velero.use_owner_references_in_backup,
            labels=ManifestTemplates._labels(config, target_name, namespace_name),
        )

    @staticmethod
    def backup_manifest(
        config: WebhookConfig,
        target_name: str,
        namespace_name: str,
        now: datetime,
        suffix: Optional[str] = None
    ) -> BackupManifest:
        """
        Generate a Backup named after the schedule and the current time

        The random suffix keeps two backups taken within the same second apart.
        """
        velero = config.velero
        schedule_name = config.schedule_name(target_name, namespace_name)
        return BackupManifest(
            name=f'{schedule_name}-{now.strftime(BACKUP_TIMESTAMP_FORMAT)}-{suffix or random_suffix()}',
            namespace=velero.namespace,
            api_version=config.api_version,
            included_namespaces=[namespace_name],
            ttl=velero.ttl,
            csi_snapshot_timeout=velero.csi_snapshot_timeout,
            item_operation_timeout=velero.item_operation_timeout,
            storage_location=velero.storage_location,
            default_volumes_to_fs_backup=velero.default_volumes_to_fs_backup,
            labels=ManifestTemplates._labels(config, target_name, namespace_name),
        )
