import logging
import os
import signal
import sys

from namespace_backup.config import get_config
from namespace_backup.exceptions import ConfigurationError
from namespace_backup.logs import init_logging
from namespace_backup.server import create_app
from namespace_backup.store import VeleroBackupStore

logger = logging.getLogger('namespace_backup')


def _handle_sigterm(signum, frame) -> None:
    # Turns SIGTERM into SystemExit so the finally block in main() runs
    logger.info("Received SIGTERM")
    raise SystemExit(0)


def main() -> None:
    try:
        config = get_config()
        init_logging(level=config.log_level, formatter=config.log_format)
    except ConfigurationError as e:
        print(f"Error setting up webhook: {e}", file=sys.stderr)
        sys.exit(1)

    tls = config.server
    for path in (tls.tls_cert, tls.tls_key):
        if not os.path.isfile(path):
            logger.error(f"TLS material not found at {path}")
            sys.exit(1)

    try:
        store = VeleroBackupStore(config)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Starting {config.name} v{config.version}")
    logger.info(f"Managing Velero objects in namespace: {config.velero.namespace}")
    logger.info(f"Enrollment labels: {config.labels.target_key}, {config.labels.runtime_key}={config.labels.runtime_sentinel}")

    signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        app = create_app(store, config)
        logger.info(f"Listening on port {tls.port}...")
        app.run(host=tls.host, port=tls.port, ssl_context=(tls.tls_cert, tls.tls_key), threaded=True)
    finally:
        logger.info("Shutting down, closing Kubernetes client")
        store.close()


if __name__ == '__main__':
    main()
