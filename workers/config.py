# =============================================================================
# workers/config.py - Celery Configuration
# =============================================================================
# Jobs are executed in-process by the queue adapters, so the broker is the
# in-memory transport and no result backend is configured.
# =============================================================================


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings
    # -------------------------------------------------------------------------

    broker_url = "memory://"

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Task exceptions are re-raised when a job is applied locally
    task_eager_propagates = True

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    # Job records must survive a JSON round trip
    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]
