"""Tests for job queue functionality."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from rq.exceptions import NoSuchJobError

from api.exceptions import ExternalServiceError

from api.services.job_service import JobService
from worker.queue import JobInfo, JobQueue, JobStatus, QueuePriority, job_info_from
from worker.redis import QUEUE_DEFAULT, QUEUE_HIGH, QUEUE_LOW
from worker.tasks.analyze import run_analysis_sync


class TestJobStatus:
    """Tests for JobStatus enum."""

    def test_job_status_values(self) -> None:
        assert JobStatus.QUEUED.value == "queued"
        assert JobStatus.STARTED.value == "started"
        assert JobStatus.FINISHED.value == "finished"
        assert JobStatus.FAILED.value == "failed"
        assert JobStatus.CANCELED.value == "canceled"

    def test_job_status_from_string(self) -> None:
        assert JobStatus("queued") == JobStatus.QUEUED


class TestQueuePriority:
    def test_queue_priority_values(self) -> None:
        assert QueuePriority.HIGH.value == "high"
        assert QueuePriority.DEFAULT.value == "default"
        assert QueuePriority.LOW.value == "low"


class TestJobInfo:
    """Tests for JobInfo dataclass."""

    def _info(self, status: JobStatus, **overrides) -> JobInfo:
        now = datetime.now(UTC)
        fields = {
            "id": "analysis-123",
            "status": status,
            "created_at": now,
            "started_at": None,
            "ended_at": None,
            "result": None,
            "error": None,
            "meta": {"theme_name": "Dawn"},
        }
        fields.update(overrides)
        return JobInfo(**fields)

    def test_job_info_to_dict(self) -> None:
        now = datetime.now(UTC)
        info = self._info(
            JobStatus.FINISHED, started_at=now, ended_at=now, result={"score": {"overall": 72}}
        )

        result = info.to_dict()

        assert result["id"] == "analysis-123"
        assert result["status"] == "finished"
        assert result["result"] == {"score": {"overall": 72}}
        assert result["ended_at"] == now.isoformat()
        assert result["meta"] == {"theme_name": "Dawn"}

    def test_unstarted_timestamps_serialize_as_none(self) -> None:
        result = self._info(JobStatus.QUEUED).to_dict()

        assert result["started_at"] is None
        assert result["ended_at"] is None

    @pytest.mark.parametrize(
        ("status", "cancellable"),
        [
            (JobStatus.QUEUED, True),
            (JobStatus.DEFERRED, True),
            (JobStatus.SCHEDULED, True),
            (JobStatus.STARTED, False),
            (JobStatus.FINISHED, False),
            (JobStatus.FAILED, False),
        ],
    )
    def test_is_cancellable(self, status: JobStatus, cancellable: bool) -> None:
        assert self._info(status).is_cancellable is cancellable


class TestJobInfoFrom:
    """Tests for converting RQ jobs."""

    def test_finished_job_carries_result(self) -> None:
        job = MagicMock()
        job.id = "analysis-1"
        job.get_status.return_value = "finished"
        job.return_value.return_value = {"score": {"overall": 80}}
        job.meta = {"store": "my-shop"}
        job.exc_info = None

        info = job_info_from(job)

        assert info.status == JobStatus.FINISHED
        assert info.result == {"score": {"overall": 80}}
        assert info.error is None
        assert info.meta == {"store": "my-shop"}

    def test_failed_job_keeps_last_traceback_line(self) -> None:
        job = MagicMock()
        job.id = "analysis-2"
        job.get_status.return_value = "failed"
        job.exc_info = "Traceback (most recent call last):\n  ...\nValueError: bad section\n"
        job.meta = {}

        info = job_info_from(job)

        assert info.status == JobStatus.FAILED
        assert info.error == "ValueError: bad section"
        assert info.result is None
        job.return_value.assert_not_called()

    def test_missing_status_defaults_to_queued(self) -> None:
        job = MagicMock()
        job.get_status.return_value = None
        job.meta = None

        info = job_info_from(job)

        assert info.status == JobStatus.QUEUED
        assert info.meta == {}


class TestJobQueue:
    """Tests for the RQ queue wrapper."""

    @pytest.fixture
    def job_queue(self):
        with patch("worker.queue.Queue") as queue_cls:
            queue_cls.side_effect = lambda name, connection: MagicMock(name=name)
            yield JobQueue(connection=MagicMock())

    def test_queues_by_priority(self, job_queue: JobQueue) -> None:
        assert set(job_queue._queues) == set(QueuePriority)

    def test_enqueue_routes_to_priority_queue(self, job_queue: JobQueue) -> None:
        job_queue.enqueue(run_analysis_sync, {"x": 1}, priority=QueuePriority.HIGH, job_id="j1")

        high = job_queue.get_queue(QueuePriority.HIGH)
        high.enqueue.assert_called_once()
        kwargs = high.enqueue.call_args.kwargs
        assert kwargs["job_id"] == "j1"
        assert kwargs["meta"] == {}
        job_queue.get_queue(QueuePriority.DEFAULT).enqueue.assert_not_called()

    def test_enqueue_generates_job_id(self, job_queue: JobQueue) -> None:
        job_queue.enqueue(run_analysis_sync, {})

        kwargs = job_queue.get_queue().enqueue.call_args.kwargs
        assert len(kwargs["job_id"]) == 36

    def test_get_job_missing(self, job_queue: JobQueue) -> None:
        with patch("worker.queue.Job.fetch", side_effect=NoSuchJobError):
            assert job_queue.get_job("nope") is None
            assert job_queue.get_job_info("nope") is None
            assert job_queue.cancel_job("nope") is False

    def test_cancel_queued_job(self, job_queue: JobQueue) -> None:
        job = MagicMock()
        job.get_status.return_value = "queued"
        job.meta = {}

        with patch("worker.queue.Job.fetch", return_value=job):
            assert job_queue.cancel_job("analysis-1") is True

        job.cancel.assert_called_once()

    def test_cannot_cancel_started_job(self, job_queue: JobQueue) -> None:
        job = MagicMock()
        job.get_status.return_value = "started"
        job.meta = {}

        with patch("worker.queue.Job.fetch", return_value=job):
            assert job_queue.cancel_job("analysis-1") is False

        job.cancel.assert_not_called()


def test_queue_names() -> None:
    assert QUEUE_HIGH == "thememetrics-high"
    assert QUEUE_DEFAULT == "thememetrics-default"
    assert QUEUE_LOW == "thememetrics-low"


class TestJobService:
    """Tests for the API-side job service."""

    @pytest.fixture
    def queue(self):
        queue = MagicMock()
        queue.enqueue.side_effect = lambda *args, **kwargs: MagicMock(id=kwargs["job_id"])
        return queue

    def test_enqueue_analysis(self, queue) -> None:
        service = JobService(queue=queue)
        payload = {"theme_name": "Dawn", "store": "my-shop", "section_files": {"a": "", "b": ""}}

        job_id = service.enqueue_analysis(payload, QueuePriority.HIGH)

        assert job_id.startswith("analysis-")
        args, kwargs = queue.enqueue.call_args
        assert args == (run_analysis_sync, payload)
        assert kwargs["priority"] == QueuePriority.HIGH
        assert kwargs["meta"] == {"theme_name": "Dawn", "store": "my-shop", "sections": 2}

    def test_enqueue_batch_keeps_order(self, queue) -> None:
        service = JobService(queue=queue)
        payloads = [{"theme_name": name} for name in ("Dawn", "Sense", "Craft")]

        job_ids = service.enqueue_batch(payloads)

        assert len(job_ids) == 3
        assert len(set(job_ids)) == 3
        themes = [call.kwargs["meta"]["theme_name"] for call in queue.enqueue.call_args_list]
        assert themes == ["Dawn", "Sense", "Craft"]

    def test_delegates_status_and_cancel(self, queue) -> None:
        service = JobService(queue=queue)
        queue.get_job_info.return_value = None
        queue.cancel_job.return_value = True

        assert service.get_job_status("analysis-1") is None
        assert service.cancel_job("analysis-1") is True
        queue.get_job_info.assert_called_once_with("analysis-1")

    def test_queue_connects_lazily(self) -> None:
        with patch("api.services.job_service.get_job_queue") as get_queue:
            service = JobService()
            get_queue.assert_not_called()

            service.get_queue_stats()

        get_queue.assert_called_once()

    def test_redis_failure_on_enqueue(self) -> None:
        queue = MagicMock()
        queue.enqueue.side_effect = RedisConnectionError("Connection refused")
        service = JobService(queue=queue)

        with pytest.raises(ExternalServiceError) as exc_info:
            service.enqueue_analysis({"theme_name": "Dawn"})

        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"service": "Redis"}

    def test_redis_failure_on_status(self) -> None:
        queue = MagicMock()
        queue.get_job_info.side_effect = RedisConnectionError("Connection refused")
        queue.get_queue_stats.side_effect = RedisConnectionError("Connection refused")
        service = JobService(queue=queue)

        with pytest.raises(ExternalServiceError):
            service.get_job_status("analysis-1")
        with pytest.raises(ExternalServiceError):
            service.get_queue_stats()
