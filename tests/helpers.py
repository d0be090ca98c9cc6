import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from namespace_backup.exceptions import ExternalCallError
from namespace_backup.store import BackupStore
from namespace_backup.templates import BACKUP_SUFFIX_ALPHABET, BackupManifest, ScheduleManifest

TARGET_LABEL = 'namespace.oam.dev/target'
RUNTIME_LABEL = 'usage.oam.dev/runtime'
ENROLLED = {TARGET_LABEL: 'prod', RUNTIME_LABEL: 'target'}


class FakeBackupStore(BackupStore):
    """In-memory BackupStore recording every call"""

    def __init__(self):
        self.schedules: Dict[str, Dict[str, Any]] = {}
        self.backups: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_on: Optional[str] = None
        self.closed = False

    def _maybe_fail(self, operation: str, name: str) -> None:
        if self.fail_on == operation:
            raise ExternalCallError(operation, name, 'Internal Server Error', 500)

    def get_schedule(self, name):
        self.calls.append(('get_schedule', name))
        self._maybe_fail('get schedule', name)
        return self.schedules.get(name)

    def create_schedule(self, manifest: ScheduleManifest):
        self.calls.append(('create_schedule', manifest.name))
        self._maybe_fail('create schedule', manifest.name)
        if manifest.name in self.schedules:
            return False
        self.schedules[manifest.name] = manifest.to_dict()
        return True

    def create_backup(self, manifest: BackupManifest):
        self.calls.append(('create_backup', manifest.name))
        self._maybe_fail('create backup', manifest.name)
        if manifest.name in self.backups:
            raise ExternalCallError('create backup', manifest.name, 'Conflict', 409)
        self.backups[manifest.name] = manifest.to_dict()

    def delete_schedule(self, name):
        self.calls.append(('delete_schedule', name))
        self._maybe_fail('delete schedule', name)
        return self.schedules.pop(name, None) is not None

    def close(self):
        self.closed = True


class TickingClock:
    """Returns a new second on every call"""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current




def backup_name(schedule: str, stamp: str = r'\d{14}'):
    """Pattern of a Backup name taken from a schedule at a given stamp"""
    return re.compile(rf'{re.escape(schedule)}-{stamp}-[{BACKUP_SUFFIX_ALPHABET}]{{5}}')
