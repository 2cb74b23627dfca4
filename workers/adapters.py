# =============================================================================
# workers/adapters.py - Queue Adapters
# =============================================================================
# A queue adapter decides how an enqueued job gets executed.
#
#   inline        - run the job right away on the caller's thread
#   async_inline  - run the job on a new thread and wait for it
#
# async_inline keeps the "enqueue returns when the job is done" behaviour of
# inline execution while running the job outside the caller's thread, the
# way production workers do (thread-locals are not shared, for example).
#
# Usage:
#   adapter = build_queue_adapter("async_inline", celery_app)
#   adapter.enqueue(some_task.s(42))
# =============================================================================

import json
import logging
import threading
from typing import Any

from celery import Celery
from celery.canvas import Signature

from app.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class InlineAdapter:
    """Executes each job immediately on the enqueuing thread."""

    def __init__(self, celery_app: Celery):
        self.celery_app = celery_app

    def serialize(self, signature: Signature) -> dict[str, Any]:
        """Turn a signature into a plain JSON-compatible job record."""
        return json.loads(json.dumps(dict(signature)))

    def execute(self, job: dict[str, Any]) -> Any:
        """
        Rebuild the signature from a job record and run it locally.

        Task exceptions are re-raised.
        """
        signature = self.celery_app.signature(job)
        result = signature.apply(throw=True)
        return result.get()

    def enqueue(self, signature: Signature) -> Any:
        return self.execute(self.serialize(signature))

    def enqueue_at(self, signature: Signature, timestamp: float) -> Any:
        raise NotImplementedError(
            "Use a queueing backend to enqueue jobs in the future"
        )


class AsyncInlineAdapter(InlineAdapter):
    """Executes each job on a new thread and blocks until it finishes."""

    def enqueue(self, signature: Signature) -> Any:
        job = self.serialize(signature)
        outcome: dict[str, Any] = {}

        def perform() -> None:
            try:
                outcome["result"] = self.execute(job)
            except BaseException as exc:
                # Handed back to the enqueuing thread below
                outcome["error"] = exc

        worker = threading.Thread(target=perform, name=f"job:{job.get('task')}")
        worker.start()
        worker.join()

        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("result")


QUEUE_ADAPTERS: dict[str, type[InlineAdapter]] = {
    "inline": InlineAdapter,
    "async_inline": AsyncInlineAdapter,
}


def build_queue_adapter(name: str, celery_app: Celery) -> InlineAdapter:
    """
    Build a queue adapter by name.

    Raises:
        ConfigurationError: If no adapter has that name
    """
    adapter_class = QUEUE_ADAPTERS.get(name)
    if adapter_class is None:
        raise ConfigurationError("queue adapter", name, sorted(QUEUE_ADAPTERS))

    logger.debug(f"Using queue adapter: {name}")
    return adapter_class(celery_app)
