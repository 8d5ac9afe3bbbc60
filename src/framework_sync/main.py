"""Main operator entrypoint using Kopf."""

import logging
import os

import kopf

from . import crd
from .k8s import init_clients
from .snapshot import Snapshot

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(**kwargs):
    """Load Kubernetes configuration before any handler runs."""
    init_clients()


def derive_status_record(body):
    """Store record describing the observed status of a Framework."""
    snapshot = Snapshot(body)
    return snapshot.get_all_update(with_snapshot=False)


@kopf.on.event(crd.GROUP, crd.VERSION, crd.PLURAL)
def framework_event(event, body, name, **kwargs):
    """Derive the normalized state of every observed Framework."""
    event_type = event.get("type")
    if event_type == "DELETED":
        logger.info(f"Framework {name} deleted from the API server")
        return

    try:
        record = derive_status_record(body)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Cannot derive status of Framework {name}: {e}")
        raise kopf.PermanentError(str(e))
    except Exception as e:
        logger.error(f"Status derivation error for Framework {name}: {e}", exc_info=True)
        raise kopf.TemporaryError(f"Status derivation failed: {e}", delay=30)

    logger.info(
        f"Framework {name} is {record['state']} "
        f"(subState={record['subState']}, exitCode={record['appExitCode']}, retries={record['retries']})"
    )


if __name__ == "__main__":
    kopf.run()
