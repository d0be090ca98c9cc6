from typing import Any, Dict, Optional

import pytest

from namespace_backup.config import WebhookConfig
from namespace_backup.executor import ActionExecutor

from helpers import FakeBackupStore, TickingClock


@pytest.fixture
def config() -> WebhookConfig:
    return WebhookConfig(log_level='DEBUG', log_format='plain')


@pytest.fixture
def store() -> FakeBackupStore:
    return FakeBackupStore()


@pytest.fixture
def executor(store, config) -> ActionExecutor:
    return ActionExecutor(store, config, clock=TickingClock())


@pytest.fixture
def namespace():
    def _namespace(name: str = 'shop', labels: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {'name': name}
        if labels is not None:
            metadata['labels'] = labels
        return {'apiVersion': 'v1', 'kind': 'Namespace', 'metadata': metadata}
    return _namespace


@pytest.fixture
def review():
    def _review(operation: str, obj=None, old=None, uid: str = 'c0ffee') -> Dict[str, Any]:
        source = obj if isinstance(obj, dict) else old if isinstance(old, dict) else {}
        metadata = source.get('metadata')
        name = metadata.get('name', '') if isinstance(metadata, dict) else ''
        return {
            'apiVersion': 'admission.k8s.io/v1',
            'kind': 'AdmissionReview',
            'request': {
                'uid': uid,
                'kind': {'group': '', 'version': 'v1', 'kind': 'Namespace'},
                'operation': operation,
                'name': name,
                'object': obj,
                'oldObject': old,
            },
        }
    return _review
