import logging
from typing import Any, Dict, Mapping, Optional

from namespace_backup.config import WebhookConfig, get_config
from namespace_backup.decision import decide
from namespace_backup.executor import ActionExecutor
from namespace_backup.logs import RequestLogger
from namespace_backup.parser import CREATE, DELETE, UPDATE, build_operation_record

logger = logging.getLogger(__name__)

_OPERATION_VERBS = {
    CREATE: 'created',
    UPDATE: 'updated',
    DELETE: 'deleted',
}


def admission_response(uid: str) -> Dict[str, Any]:
    """
    AdmissionReview that lets the namespace operation through

    Backup bookkeeping never blocks the namespace itself.
    """
    return {
        'apiVersion': 'admission.k8s.io/v1',
        'kind': 'AdmissionReview',
        'response': {
            'uid': uid,
            'allowed': True,
        },
    }


class AdmissionHandler:
    """
    Handles one AdmissionReview for a Namespace: decode, decide, execute
    """

    def __init__(self, executor: ActionExecutor, config: Optional[WebhookConfig] = None):
        self.executor = executor
        self.config = config or get_config()

    def handle(self, review: Mapping[str, Any], log: Optional[RequestLogger] = None) -> Dict[str, Any]:
        """
        Raises:
            DecodeError: If the namespace objects cannot be decoded
            ExternalCallError: If a Velero call fails
        """
        log = log or RequestLogger(logger, {})

        record = build_operation_record(review['request'], self.config.labels)
        log = log.bind(uid=record.uid, namespace=record.resource_name)

        if verb := _OPERATION_VERBS.get(record.kind):
            log.info(f"Namespace {record.resource_name} {verb}")

        actions = decide(record)
        if actions:
            log.debug(f"Actions for namespace {record.resource_name}: {actions}")
        if record.dry_run:
            if actions:
                log.info(f"Dry run, skipping Velero changes for namespace {record.resource_name}")
        else:
            self.executor.execute(actions, record.resource_name, log)

        return admission_response(record.uid)
