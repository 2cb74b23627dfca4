# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The Celery app owns the task registry. Jobs never travel through a broker:
# queue adapters (workers/adapters.py) rebuild signatures and apply them
# in-process.
# =============================================================================

import logging
import threading

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    """
    Build the Celery app holding the harness jobs.

    Returns:
        Celery app with workers.tasks registered
    """
    app = Celery("harness_jobs", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")

    logger.debug("Celery app created (jobs run through queue adapters)")
    return app


celery_app = create_celery_app()


@celery_app.task(bind=True, name="workers.healthcheck")
def healthcheck(self):
    """
    Job used by /health/ready to prove the queue adapter runs jobs.

    Usage:
        harness.perform_later("workers.healthcheck")  # -> "OK"
    """
    return "OK"


# =============================================================================
# Job Lifecycle Logging
# =============================================================================

@task_prerun.connect
def log_job_start(sender=None, task_id=None, task=None, args=None, **extra):
    logger.info(
        f"Performing {task.name} [{task_id}] on {threading.current_thread().name} args={args!r}"
    )


@task_postrun.connect
def log_job_done(sender=None, task_id=None, task=None, state=None, **extra):
    logger.info(f"Performed {task.name} [{task_id}] - {state}")


@task_failure.connect
def log_job_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Error performing {sender.name} [{task_id}]: {exception!r}")
