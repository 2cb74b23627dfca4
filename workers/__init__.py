# =============================================================================
# workers/ - Background Jobs
# =============================================================================
# This package contains the job side of the harness:
# - celery_app.py: Celery application owning the tasks
# - adapters.py: Queue adapters that execute enqueued jobs
# - tasks.py: Task definitions (blob analysis and purging)
# - config.py: Celery settings
#
# Usage:
#   from workers import celery_app, build_queue_adapter
#   adapter = build_queue_adapter("async_inline", celery_app)
#   adapter.enqueue(celery_app.signature("workers.healthcheck"))
# =============================================================================

from .celery_app import celery_app
from .adapters import AsyncInlineAdapter, InlineAdapter, build_queue_adapter
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
    "InlineAdapter",
    "AsyncInlineAdapter",
    "build_queue_adapter",
]
