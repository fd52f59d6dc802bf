# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# Runs outbound webhook delivery and share emails off the request path.
#
# Usage:
#   celery -A workers.celery_app worker -Q webhooks,email,default --loglevel=info
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redact(url: str) -> str:
    """Drop credentials from a broker URL for logging."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Build the Celery app from workers.config.CeleryConfig.

    Broker and result backend both come from settings.REDIS_URL.
    """
    from workers.config import CeleryConfig

    app = Celery("proposalkraft_worker", include=["workers.tasks"])
    app.config_from_object(CeleryConfig)
    logger.info(f"Celery app created with broker: {_redact(CeleryConfig.broker_url)}")
    return app


celery_app = create_celery_app()


@celery_app.task(name="workers.healthcheck")
def healthcheck() -> str:
    """Return "OK" when a worker picks the task up."""
    return "OK"


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, **extra):
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def log_task_done(sender=None, task_id=None, task=None, state=None, **extra):
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_retry.connect
def log_task_retry(sender=None, request=None, reason=None, **extra):
    logger.warning(f"Task retrying: {sender.name} [{request.id if request else '?'}] - {reason}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
