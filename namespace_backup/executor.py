import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from namespace_backup.config import WebhookConfig, get_config
from namespace_backup.decision import Action, DeleteSchedule, EnsureScheduleAndBackup
from namespace_backup.store import BackupStore
from namespace_backup.templates import ManifestTemplates, random_suffix

logger = logging.getLogger(__name__)


class ActionExecutor:
    """
    Carries out lifecycle actions for one namespace against a BackupStore

    Actions run in order. The first ExternalCallError stops the remaining
    actions and propagates; nothing already created is rolled back.
    """

    def __init__(
        self,
        store: BackupStore,
        config: Optional[WebhookConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
        suffix: Callable[[], str] = random_suffix
    ):
        self.store = store
        self.config = config or get_config()
        self.clock = clock
        self.suffix = suffix

    def execute(self, actions: Iterable[Action], namespace_name: str, log=logger) -> None:
        for action in actions:
            if isinstance(action, EnsureScheduleAndBackup):
                self.ensure_schedule_and_backup(action.target_name, namespace_name, log)
            elif isinstance(action, DeleteSchedule):
                self.delete_schedule(action.target_name, namespace_name, log)
            else:
                raise TypeError(f"Unsupported action: {action!r}")

    def ensure_schedule_and_backup(self, target_name: str, namespace_name: str, log=logger) -> None:
        schedule = ManifestTemplates.schedule_manifest(self.config, target_name, namespace_name)

        if self.store.get_schedule(schedule.name) is not None:
            log.info(f"Velero schedule {schedule.name} already exists")
        else:
            log.info(f"Creating Velero schedule {schedule.name}")
            if not self.store.create_schedule(schedule):
                log.info(f"Velero schedule {schedule.name} already exists")

        backup = ManifestTemplates.backup_manifest(self.config, target_name, namespace_name, self.clock(), self.suffix())
        log.info(f"Creating Velero backup {backup.name}")
        self.store.create_backup(backup)

    def delete_schedule(self, target_name: str, namespace_name: str, log=logger) -> None:
        name = self.config.schedule_name(target_name, namespace_name)
        log.info(f"Deleting Velero schedule {name}")
        if not self.store.delete_schedule(name):
            log.warning(f"Tried to delete non-existing Velero schedule {name}")
