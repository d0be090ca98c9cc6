import pytest

from namespace_backup import config as config_module
from namespace_backup.config import WebhookConfig, get_config, set_config
from namespace_backup.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def reset_global_config():
    yield
    config_module._config = None


def test_defaults(config):
    assert config.project == 'test-project'
    assert config.velero.namespace == 'velero'
    assert config.velero.schedule == '@every 5m'
    assert config.velero.ttl == '720h0m0s'
    assert config.velero.csi_snapshot_timeout == '10m'
    assert config.velero.item_operation_timeout == '4h'
    assert config.velero.ignore_missing_on_delete is True
    assert config.labels.target_key == 'namespace.oam.dev/target'
    assert config.labels.runtime_key == 'usage.oam.dev/runtime'
    assert config.labels.runtime_sentinel == 'target'
    assert config.server.port == 443
    assert config.api_timeout_seconds is None
    assert config.schedule_name('prod', 'shop') == 'test-project-prod-shop'
    assert config.api_version == 'velero.io/v1'


def test_from_env(monkeypatch):
    monkeypatch.setenv('PROJECT_NAME', 'acme')
    monkeypatch.setenv('WEBHOOK_PORT', '8443')
    monkeypatch.setenv('VELERO_NAMESPACE', 'backups')
    monkeypatch.setenv('BACKUP_SCHEDULE', '0 2 * * *')
    monkeypatch.setenv('IGNORE_MISSING_ON_DELETE', 'false')
    monkeypatch.setenv('TARGET_LABEL', 'backup/target')
    monkeypatch.setenv('KUBE_API_TIMEOUT', '5')
    monkeypatch.setenv('LOG_FORMAT', 'json')

    config = WebhookConfig.from_env()

    assert config.schedule_name('prod', 'shop') == 'acme-prod-shop'
    assert config.server.port == 8443
    assert config.velero.namespace == 'backups'
    assert config.velero.schedule == '0 2 * * *'
    assert config.velero.ignore_missing_on_delete is False
    assert config.labels.target_key == 'backup/target'
    assert config.api_timeout_seconds == 5.0
    assert config.log_format == 'json'


@pytest.mark.parametrize('name, value', [('WEBHOOK_PORT', 'https'), ('KUBE_API_TIMEOUT', 'soon')])
def test_from_env_rejects_non_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        WebhookConfig.from_env()


@pytest.mark.parametrize('overrides', [
    {'log_level': 'LOUD'},
    {'log_format': 'xml'},
    {'project': ''},
    {'api_timeout_seconds': 0},
])
def test_validate_rejects(overrides):
    with pytest.raises(ConfigurationError):
        WebhookConfig(**overrides).validate()


def test_validate_accepts_lowercase_level():
    WebhookConfig(log_level='info').validate()


def test_get_config_is_cached(monkeypatch):
    monkeypatch.setenv('PROJECT_NAME', 'first')
    first = get_config()
    monkeypatch.setenv('PROJECT_NAME', 'second')
    assert get_config() is first
    assert first.project == 'first'


def test_set_config_validates():
    with pytest.raises(ConfigurationError):
        set_config(WebhookConfig(log_format='xml'))

    config = WebhookConfig(project='acme')
    set_config(config)
    assert get_config() is config
