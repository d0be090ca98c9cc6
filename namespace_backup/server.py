"""
HTTP surface of the webhook
"""

import logging
from typing import Optional

from flask import Flask, Response, current_app, jsonify, request

from namespace_backup.config import WebhookConfig, get_config
from namespace_backup.exceptions import DecodeError, ExternalCallError
from namespace_backup.executor import ActionExecutor
from namespace_backup.handlers import AdmissionHandler
from namespace_backup.logs import RequestLogger
from namespace_backup.parser import parse_review
from namespace_backup.store import BackupStore

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'namespace_backup'


def create_app(store: BackupStore, config: Optional[WebhookConfig] = None) -> Flask:
    """
    Build the Flask application

    The store is shared by all requests. The caller created it and closes it
    once the application stops serving.
    """
    config = config or get_config()

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = AdmissionHandler(ActionExecutor(store, config), config)
    app.extensions[f'{EXTENSION_KEY}.store'] = store

    app.add_url_rule('/validate', 'validate', validate, methods=['POST'])
    app.add_url_rule('/health', 'health', health, methods=['GET'])

    return app


def validate():
    log = RequestLogger(logger, {'uri': request.full_path.rstrip('?')})
    log.debug("Received admission request")

    try:
        if request.mimetype != 'application/json':
            raise DecodeError(f"Content-Type: {request.content_type!r} should be 'application/json'")
        review = parse_review(request.get_data())
        response = current_app.extensions[EXTENSION_KEY].handle(review, log)
    except DecodeError as e:
        log.error("Failed to parse request", extra={'error': str(e)})
        return Response(str(e), status=400, mimetype='text/plain')
    except ExternalCallError as e:
        log.error("Failed to manage Velero objects", extra={'error': str(e)})
        return Response(str(e), status=500, mimetype='text/plain')

    return jsonify(response)


def health():
    logger.debug("healthy", extra={'uri': request.path})
    return Response('ok', status=200, mimetype='text/plain')
