# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Side effects the API queues instead of running inline:
# - celery_app.py: Celery application and lifecycle logging
# - config.py: Queues, serialization, retry policy
# - tasks.py: dispatch_webhook_event, send_share_email
#
# Usage:
#   celery -A workers.celery_app worker --loglevel=info
#
#   from workers.tasks import dispatch_webhook_event
#   dispatch_webhook_event.delay(user_id, "proposal.signed", {...})
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
