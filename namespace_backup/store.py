"""
Access to Velero schedules and backups through the Kubernetes API
"""

import logging
from typing import Any, Dict, Optional

import kubernetes
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException

from namespace_backup.config import WebhookConfig
from namespace_backup.exceptions import ConfigurationError, ExternalCallError
from namespace_backup.templates import BackupManifest, ScheduleManifest

SCHEDULES_PLURAL = 'schedules'
BACKUPS_PLURAL = 'backups'

logger = logging.getLogger(__name__)


def load_api_client() -> kubernetes.client.ApiClient:
    """
    Build the process-wide Kubernetes API client

    In-cluster configuration is tried first, then the local kubeconfig.
    """
    try:
        kubernetes.config.load_incluster_config()
        logger.info("Loaded in-cluster config")
    except ConfigException:
        try:
            kubernetes.config.load_kube_config()
        except (ConfigException, OSError) as e:
            raise ConfigurationError(f"Could not load Kubernetes configuration: {e}") from e
        logger.info("Loaded kubeconfig")

    return kubernetes.client.ApiClient()


class BackupStore:
    """
    Operations the executor needs from the backup system

    ``get_schedule`` returns None when the schedule does not exist.
    ``create_schedule`` returns False when it already exists.
    ``delete_schedule`` returns False when there was nothing to delete.
    Any other failure raises ExternalCallError.
    """

    def get_schedule(self, name: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def create_schedule(self, manifest: ScheduleManifest) -> bool:
        raise NotImplementedError

    def create_backup(self, manifest: BackupManifest) -> None:
        raise NotImplementedError

    def delete_schedule(self, name: str) -> bool:
        raise NotImplementedError

    def close(self) -> None:
        pass


class VeleroBackupStore(BackupStore):
    """
    BackupStore backed by Velero custom resources
    """

    def __init__(self, config: WebhookConfig, api_client: Optional[kubernetes.client.ApiClient] = None):
        self.config = config
        self.api_client = api_client if api_client is not None else load_api_client()
        self.api = kubernetes.client.CustomObjectsApi(self.api_client)

    def _call_kwargs(self) -> Dict[str, Any]:
        kwargs = {
            'group': self.config.velero.api_group,
            'version': self.config.velero.api_version,
            'namespace': self.config.velero.namespace,
        }
        if self.config.api_timeout_seconds is not None:
            kwargs['_request_timeout'] = self.config.api_timeout_seconds
        return kwargs

    def get_schedule(self, name: str) -> Optional[Dict[str, Any]]:
        try:
            return self.api.get_namespaced_custom_object(plural=SCHEDULES_PLURAL, name=name, **self._call_kwargs())
        except ApiException as e:
            if e.status == 404:
                return None
            raise ExternalCallError('get schedule', name, e.reason, e.status) from e

    def create_schedule(self, manifest: ScheduleManifest) -> bool:
        try:
            self.api.create_namespaced_custom_object(
                plural=SCHEDULES_PLURAL,
                body=manifest.to_dict(),
                **self._call_kwargs()
            )
        except ApiException as e:
            if e.status == 409:
                return False
            raise ExternalCallError('create schedule', manifest.name, e.reason, e.status) from e
        return True

    def create_backup(self, manifest: BackupManifest) -> None:
        try:
            self.api.create_namespaced_custom_object(
                plural=BACKUPS_PLURAL,
                body=manifest.to_dict(),
                **self._call_kwargs()
            )
        except ApiException as e:
            raise ExternalCallError('create backup', manifest.name, e.reason, e.status) from e

    def delete_schedule(self, name: str) -> bool:
        try:
            self.api.delete_namespaced_custom_object(
                plural=SCHEDULES_PLURAL,
                name=name,
                body=kubernetes.client.V1DeleteOptions(),
                **self._call_kwargs()
            )
        except ApiException as e:
            if e.status == 404 and self.config.velero.ignore_missing_on_delete:
                return False
            raise ExternalCallError('delete schedule', name, e.reason, e.status) from e
        return True

    def close(self) -> None:
        self.api_client.close()
