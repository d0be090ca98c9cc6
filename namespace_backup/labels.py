"""
Enrollment predicate over namespace labels
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from namespace_backup.config import LabelConfig


@dataclass(frozen=True)
class ResourceLabelView:
    """Backup enrollment state of one namespace snapshot"""
    enrolled: bool = False
    target_name: str = ''


NOT_ENROLLED = ResourceLabelView()


def evaluate(labels: Mapping[str, str], label_config: Optional[LabelConfig] = None) -> ResourceLabelView:
    """
    Decide whether a namespace is enrolled for backups

    A namespace is enrolled when the target label has a non-empty value and
    the runtime label equals the sentinel exactly. No other label matters.
    """
    label_config = label_config or LabelConfig()
    target = labels.get(label_config.target_key, '')
    runtime = labels.get(label_config.runtime_key)

    if target and runtime == label_config.runtime_sentinel:
        return ResourceLabelView(enrolled=True, target_name=target)
    return NOT_ENROLLED
