"""
Decoding of AdmissionReview requests into operation records
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from namespace_backup.config import LabelConfig
from namespace_backup.exceptions import DecodeError
from namespace_backup.labels import NOT_ENROLLED, ResourceLabelView, evaluate

CREATE = 'CREATE'
UPDATE = 'UPDATE'
DELETE = 'DELETE'

RawPayload = Union[Mapping[str, Any], str, bytes, None]


@dataclass(frozen=True)
class OperationRecord:
    """One admission call, reduced to what the decision engine needs"""
    kind: str
    resource_name: str
    current: ResourceLabelView = NOT_ENROLLED
    previous: ResourceLabelView = NOT_ENROLLED
    uid: str = ''
    dry_run: bool = False


def parse_review(body: Union[str, bytes]) -> Dict[str, Any]:
    """
    Decode an AdmissionReview body

    Raises:
        DecodeError: If the body is empty, not JSON, or carries no request
    """
    if not body:
        raise DecodeError("Admission request body is empty")

    try:
        review = json.loads(body)
    except ValueError as e:
        raise DecodeError(f"Failed to parse admission request: {e}") from e

    if not isinstance(review, dict) or not isinstance(review.get('request'), dict):
        raise DecodeError("Admission request is empty")

    return review


def decode_object(payload: RawPayload, what: str = 'namespace') -> Optional[Dict[str, Any]]:
    """
    Decode one object payload; None stays None

    Payloads arrive either already decoded or as raw JSON.
    """
    if payload is None:
        return None

    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise DecodeError(f"Could not parse {what}: {e}") from e
        if payload is None:
            return None

    if not isinstance(payload, Mapping):
        raise DecodeError(f"Could not parse {what}: expected an object, got {type(payload).__name__}")

    return dict(payload)


def object_labels(obj: Optional[Mapping[str, Any]], what: str = 'namespace') -> Dict[str, str]:
    """Labels of a decoded object, validated to be a string map"""
    if obj is None:
        return {}

    metadata = obj.get('metadata') or {}
    if not isinstance(metadata, Mapping):
        raise DecodeError(f"Could not parse {what}: metadata is not an object")

    labels = metadata.get('labels') or {}
    if not isinstance(labels, Mapping):
        raise DecodeError(f"Could not parse {what}: labels are not an object")

    for key, value in labels.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise DecodeError(f"Could not parse {what}: label {key!r} is not a string pair")

    return dict(labels)


def object_name(obj: Optional[Mapping[str, Any]]) -> str:
    if obj is None:
        return ''
    name = (obj.get('metadata') or {}).get('name') or ''
    if not isinstance(name, str):
        raise DecodeError("Could not parse namespace: name is not a string")
    return name


def build_operation_record(request: Mapping[str, Any], label_config: Optional[LabelConfig] = None) -> OperationRecord:
    """
    Turn the ``request`` part of an AdmissionReview into an OperationRecord

    The proposed object is decoded for every operation. The prior object is
    required for UPDATE and DELETE. For DELETE the proposed object is usually
    null, and the namespace counts as not enrolled.

    Raises:
        DecodeError: If an object cannot be decoded into a namespace
    """
    kind = request.get('operation') or ''
    if not isinstance(kind, str):
        raise DecodeError(f"Admission request operation must be a string, got {type(kind).__name__}")
    uid = request.get('uid') or ''
    dry_run = request.get('dryRun') or False
    if not isinstance(dry_run, bool):
        raise DecodeError(f"Admission request dryRun must be a boolean, got {type(dry_run).__name__}")

    current = decode_object(request.get('object'))
    if current is None and kind in (CREATE, UPDATE):
        raise DecodeError("Could not parse namespace: object is missing")
    current_labels = object_labels(current)

    previous = None
    if kind in (UPDATE, DELETE):
        previous = decode_object(request.get('oldObject'), what='old namespace')
        if previous is None:
            raise DecodeError("Could not parse old namespace: oldObject is missing")
    previous_labels = object_labels(previous, what='old namespace')

    resource_name = object_name(current) or object_name(previous) or request.get('name') or ''

    return OperationRecord(
        kind=kind,
        resource_name=resource_name,
        current=evaluate(current_labels, label_config) if kind != DELETE else NOT_ENROLLED,
        previous=evaluate(previous_labels, label_config) if previous is not None else NOT_ENROLLED,
        uid=uid,
        dry_run=dry_run,
    )
