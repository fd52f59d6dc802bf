# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied via celery_app.config_from_object(CeleryConfig).
# =============================================================================

from app.config import settings


class CeleryConfig:
    """Celery settings for the ProposalKraft worker."""

    # Broker / backend (Redis)
    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL
    result_expires = 3600

    # Ack after completion so a crashed worker's task is redelivered
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Webhook delivery is bounded by WEBHOOK_TIMEOUT_SECONDS per endpoint
    task_time_limit = 120
    task_soft_time_limit = 90

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # Queues
    task_queues = {
        "default": {"exchange": "default", "routing_key": "default"},
        "webhooks": {"exchange": "webhooks", "routing_key": "webhooks"},
        "email": {"exchange": "email", "routing_key": "email"},
    }
    task_routes = {
        "workers.tasks.dispatch_webhook_event": {"queue": "webhooks"},
        "workers.tasks.send_share_email": {"queue": "email"},
    }
    task_default_queue = "default"

    # Three retries, 60 s apart
    task_annotations = {
        "*": {
            "max_retries": 3,
            "default_retry_delay": 60,
        }
    }

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
