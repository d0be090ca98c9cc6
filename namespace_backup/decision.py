"""
Label transition decisions

A namespace moves between two states, Unenrolled and Enrolled. Entering
Enrolled takes a schedule and an immediate backup, leaving it removes the
schedule. Staying in either state does nothing, so unrelated label changes
never cause another backup. Deleting the namespace leaves Enrolled.
"""

import logging
from dataclasses import dataclass
from typing import List, Union

from namespace_backup.parser import CREATE, DELETE, UPDATE, OperationRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsureScheduleAndBackup:
    target_name: str


@dataclass(frozen=True)
class DeleteSchedule:
    target_name: str


Action = Union[EnsureScheduleAndBackup, DeleteSchedule]


def decide(record: OperationRecord) -> List[Action]:
    """
    Map an operation to the lifecycle actions it requires

    Every combination of operation kind and enrollment state yields exactly
    one answer; unknown kinds yield no actions.
    """
    current, previous = record.current, record.previous

    if record.kind == CREATE:
        if current.enrolled:
            return [EnsureScheduleAndBackup(current.target_name)]
        return []

    if record.kind == UPDATE:
        if current.enrolled and not previous.enrolled:
            return [EnsureScheduleAndBackup(current.target_name)]
        if previous.enrolled and not current.enrolled:
            return [DeleteSchedule(previous.target_name)]
        return []

    if record.kind == DELETE:
        if previous.enrolled:
            return [DeleteSchedule(previous.target_name)]
        return []

    logger.info(f"Unknown operation {record.kind!r} for namespace {record.resource_name}, nothing to do")
    return []
