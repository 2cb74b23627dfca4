# =============================================================================
# tests/test_queue_adapters.py - Queue Adapter Tests
# =============================================================================
# This module contains tests for:
# - AsyncInlineAdapter: jobs run on another thread, enqueue waits for them
# - InlineAdapter: jobs run on the caller's thread
# - Adapter selection by name
# =============================================================================

import json
import threading

import pytest

from app.exceptions import ConfigurationError
from workers import celery_app
from workers.adapters import AsyncInlineAdapter, InlineAdapter, build_queue_adapter

RECORDED: list = []
LOCAL = threading.local()


@celery_app.task(name="tests.current_thread")
def current_thread_job():
    return threading.get_ident()


@celery_app.task(name="tests.record")
def record_job(value):
    RECORDED.append(value)
    return value


@celery_app.task(name="tests.fail")
def failing_job(message):
    raise ValueError(message)


@celery_app.task(name="tests.read_local")
def read_local_job():
    return getattr(LOCAL, "value", None)


@pytest.fixture(autouse=True)
def clear_recorded():
    RECORDED.clear()
    yield
    RECORDED.clear()


# =============================================================================
# AsyncInlineAdapter Tests
# =============================================================================

class TestAsyncInlineAdapter:
    """Test AsyncInlineAdapter execution semantics."""

    @pytest.fixture
    def adapter(self):
        return AsyncInlineAdapter(celery_app)

    def test_runs_job_on_another_thread(self, adapter):
        """The job's thread is not the caller's thread."""
        job_thread = adapter.enqueue(current_thread_job.s())

        assert job_thread != threading.get_ident()

    def test_enqueue_returns_after_job_completes(self, adapter):
        """Side effects of the job are visible as soon as enqueue returns."""
        result = adapter.enqueue(record_job.s("done"))

        assert result == "done"
        assert RECORDED == ["done"]

    def test_runs_jobs_in_order(self, adapter):
        for value in range(3):
            adapter.enqueue(record_job.s(value))

        assert RECORDED == [0, 1, 2]

    def test_job_error_reaches_caller(self, adapter):
        """A failing job raises in the enqueuing thread."""
        with pytest.raises(ValueError, match="boom"):
            adapter.enqueue(failing_job.s("boom"))

    def test_thread_locals_are_not_shared(self, adapter):
        LOCAL.value = "caller"
        try:
            assert adapter.enqueue(read_local_job.s()) is None
        finally:
            del LOCAL.value

    def test_enqueue_at_is_not_supported(self, adapter):
        with pytest.raises(NotImplementedError):
            adapter.enqueue_at(record_job.s(1), 0)


# =============================================================================
# InlineAdapter Tests
# =============================================================================

class TestInlineAdapter:
    """Test InlineAdapter execution semantics."""

    def test_runs_job_on_caller_thread(self):
        adapter = InlineAdapter(celery_app)

        assert adapter.enqueue(current_thread_job.s()) == threading.get_ident()

    def test_serialized_job_is_json(self):
        """The job record survives a JSON round trip."""
        adapter = InlineAdapter(celery_app)

        job = adapter.serialize(record_job.s("x", 1))

        assert json.loads(json.dumps(job)) == job
        assert job["task"] == "tests.record"
        assert job["args"] == ["x", 1]

    def test_job_error_propagates(self):
        with pytest.raises(ValueError, match="inline"):
            InlineAdapter(celery_app).enqueue(failing_job.s("inline"))


# =============================================================================
# Adapter Selection Tests
# =============================================================================

class TestBuildQueueAdapter:
    """Test build_queue_adapter lookup."""

    def test_builds_named_adapters(self):
        assert type(build_queue_adapter("async_inline", celery_app)) is AsyncInlineAdapter
        assert type(build_queue_adapter("inline", celery_app)) is InlineAdapter

    def test_unknown_adapter(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_queue_adapter("sidekiq", celery_app)

        assert exc_info.value.details["allowed"] == ["async_inline", "inline"]

    def test_healthcheck_job(self):
        adapter = build_queue_adapter("async_inline", celery_app)

        assert adapter.enqueue(celery_app.signature("workers.healthcheck")) == "OK"
