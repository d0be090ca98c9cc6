"""
Configuration management for the Namespace Backup Webhook
"""

import logging
import os
from typing import Optional
from dataclasses import dataclass, field

from namespace_backup.exceptions import ConfigurationError


@dataclass
class LabelConfig:
    """Namespace labels that enroll a namespace for backups"""
    target_key: str = 'namespace.oam.dev/target'
    runtime_key: str = 'usage.oam.dev/runtime'
    runtime_sentinel: str = 'target'


@dataclass
class VeleroConfig:
    """Velero schedule and backup policy"""
    namespace: str = 'velero'
    api_group: str = 'velero.io'
    api_version: str = 'v1'
    storage_location: str = 'default'

    schedule: str = '@every 5m'
    ttl: str = '720h0m0s'  # 30 days
    csi_snapshot_timeout: str = '10m'
    item_operation_timeout: str = '4h'
    default_volumes_to_fs_backup: bool = True
    use_owner_references_in_backup: bool = False

    # Deleting a schedule that is already gone counts as success
    ignore_missing_on_delete: bool = True


@dataclass
class ServerConfig:
    """HTTPS listener settings"""
    host: str = '0.0.0.0'
    port: int = 443
    tls_cert: str = '/etc/admission-webhook/tls/tls.crt'
    tls_key: str = '/etc/admission-webhook/tls/tls.key'


@dataclass
class WebhookConfig:
    """Main webhook configuration"""

    name: str = 'namespace-backup-webhook'
    version: str = '0.1.0'

    # Prefix of every schedule and backup name
    project: str = 'test-project'

    labels: LabelConfig = field(default_factory=LabelConfig)
    velero: VeleroConfig = field(default_factory=VeleroConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # None leaves Kubernetes API calls without a client-side timeout
    api_timeout_seconds: Optional[float] = None

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'DEBUG'))
    log_format: str = field(default_factory=lambda: os.getenv('LOG_FORMAT', 'plain'))

    @classmethod
    def from_env(cls) -> 'WebhookConfig':
        """
        Create configuration from environment variables

        Environment variables:
        - LOG_LEVEL: Logging level (default: DEBUG)
        - LOG_FORMAT: 'json' or 'plain' (default: plain)
        - WEBHOOK_PORT: HTTPS port (default: 443)
        - WEBHOOK_TLS_CERT / WEBHOOK_TLS_KEY: Certificate pair paths
        - PROJECT_NAME: Prefix for schedule and backup names (default: test-project)
        - VELERO_NAMESPACE: Namespace holding Velero objects (default: velero)
        - VELERO_STORAGE_LOCATION: Backup storage location (default: default)
        - BACKUP_SCHEDULE: Schedule cadence (default: @every 5m)
        - BACKUP_TTL: Retention of schedules and backups (default: 720h0m0s)
        - CSI_SNAPSHOT_TIMEOUT: (default: 10m)
        - ITEM_OPERATION_TIMEOUT: (default: 4h)
        - TARGET_LABEL / RUNTIME_LABEL: Enrollment label keys
        - IGNORE_MISSING_ON_DELETE: Treat a missing schedule on delete as success (default: true)
        - KUBE_API_TIMEOUT: Seconds before a Kubernetes API call is abandoned (default: none)
        """
        config = cls()

        if project := os.getenv('PROJECT_NAME'):
            config.project = project

        if port := os.getenv('WEBHOOK_PORT'):
            try:
                config.server.port = int(port)
            except ValueError:
                raise ConfigurationError(f"WEBHOOK_PORT must be an integer, got {port!r}")
        if cert := os.getenv('WEBHOOK_TLS_CERT'):
            config.server.tls_cert = cert
        if key := os.getenv('WEBHOOK_TLS_KEY'):
            config.server.tls_key = key

        if namespace := os.getenv('VELERO_NAMESPACE'):
            config.velero.namespace = namespace
        if location := os.getenv('VELERO_STORAGE_LOCATION'):
            config.velero.storage_location = location
        if schedule := os.getenv('BACKUP_SCHEDULE'):
            config.velero.schedule = schedule
        if ttl := os.getenv('BACKUP_TTL'):
            config.velero.ttl = ttl
        if snapshot_timeout := os.getenv('CSI_SNAPSHOT_TIMEOUT'):
            config.velero.csi_snapshot_timeout = snapshot_timeout
        if item_timeout := os.getenv('ITEM_OPERATION_TIMEOUT'):
            config.velero.item_operation_timeout = item_timeout
        if ignore_missing := os.getenv('IGNORE_MISSING_ON_DELETE'):
            config.velero.ignore_missing_on_delete = ignore_missing.lower() == 'true'

        if target_key := os.getenv('TARGET_LABEL'):
            config.labels.target_key = target_key
        if runtime_key := os.getenv('RUNTIME_LABEL'):
            config.labels.runtime_key = runtime_key

        if api_timeout := os.getenv('KUBE_API_TIMEOUT'):
            try:
                config.api_timeout_seconds = float(api_timeout)
            except ValueError:
                raise ConfigurationError(f"KUBE_API_TIMEOUT must be a number, got {api_timeout!r}")

        return config

    def validate(self) -> None:
        """
        Validate configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")

        if self.log_format not in ('json', 'plain'):
            raise ConfigurationError(f"Log format must be 'json' or 'plain', got {self.log_format!r}")

        if not self.project:
            raise ConfigurationError("Project name must not be empty")

        if not self.velero.namespace:
            raise ConfigurationError("Velero namespace must not be empty")

        if not self.velero.schedule:
            raise ConfigurationError("Backup schedule must not be empty")

        if not self.labels.target_key or not self.labels.runtime_key:
            raise ConfigurationError("Enrollment label keys must not be empty")

        if not 0 < self.server.port < 65536:
            raise ConfigurationError(f"Port {self.server.port} is out of range")

        if self.api_timeout_seconds is not None and self.api_timeout_seconds <= 0:
            raise ConfigurationError("Kubernetes API timeout must be positive")

    @property
    def api_version(self) -> str:
        """apiVersion of the Velero objects, e.g. velero.io/v1"""
        return f'{self.velero.api_group}/{self.velero.api_version}'

    def schedule_name(self, target_name: str, namespace_name: str) -> str:
        """Deterministic schedule name for a (target, namespace) pair"""
        return f'{self.project}-{target_name}-{namespace_name}'


# Global configuration instance
_config: Optional[WebhookConfig] = None


def get_config() -> WebhookConfig:
    """
    Get the global configuration instance (singleton pattern)

    Returns:
        WebhookConfig: The global configuration
    """
    global _config
    if _config is None:
        _config = WebhookConfig.from_env()
        _config.validate()
    return _config


def set_config(config: WebhookConfig) -> None:
    """
    Set the global configuration instance

    Args:
        config: New configuration instance
    """
    global _config
    config.validate()
    _config = config
