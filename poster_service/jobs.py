"""
Background job queue for uploaded batches.

Uploads enqueue a job and return immediately. Worker threads drain the queue
and record each job's outcome in an in-memory status table keyed by job id,
so clients can poll `/jobs/{id}` instead of inferring completion from the
catalog. Job state does not survive a restart.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
import logging
from pathlib import Path
import queue
import shutil
import threading
from typing import Dict, List, Optional
import uuid

from . import config
from .errors import PosterServiceError
from .pipeline import process_guest_list

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATUSES = {JobStatus.SUCCEEDED, JobStatus.FAILED}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    id: str
    poster_path: Path
    invites_path: Path
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total: int = 0
    rendered: int = 0
    failed: int = 0
    error: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.status in TERMINAL_STATUSES


_STOP = object()

JOBS_DIRNAME = "jobs"


class JobQueue:
    """FIFO of batch jobs drained by `job_workers` daemon threads."""

    def __init__(self, settings: Optional[config.Settings] = None):
        self.settings = settings or config.get_settings()
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._jobs: Dict[str, Job] = {}
        self._finished: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        with self._lock:
            if self._threads:
                return
            for idx in range(self.settings.job_workers):
                thread = threading.Thread(target=self._work, name=f"poster-job-{idx}", daemon=True)
                thread.start()
                self._threads.append(thread)
        logger.info("Job queue started with %d worker(s)", self.settings.job_workers)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the workers once queued jobs have been processed."""
        with self._lock:
            threads, self._threads = self._threads, []
        for _ in threads:
            self._queue.put(_STOP)
        if wait:
            for thread in threads:
                thread.join()
        logger.info("Job queue stopped")

    def submit(self, poster_path: Path, invites_path: Path) -> Job:
        """
        Queue a batch for the given inputs.

        The inputs are copied into a directory owned by the job, so later
        uploads that overwrite the staging files cannot change what it renders.
        """
        job_id = uuid.uuid4().hex
        job_dir = self._job_dir(job_id)
        job_dir.mkdir(parents=True)
        try:
            job_poster = Path(shutil.copyfile(poster_path, job_dir / Path(poster_path).name))
            job_invites = Path(shutil.copyfile(invites_path, job_dir / Path(invites_path).name))
        except OSError:
            shutil.rmtree(job_dir, ignore_errors=True)
            raise
        job = Job(id=job_id, poster_path=job_poster, invites_path=job_invites)
        with self._lock:
            self._jobs[job.id] = job
            self._finished[job.id] = threading.Event()
        self._queue.put(job.id)
        logger.info("Queued job %s", job.id)
        return replace(job)

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job is not None else None

    def list(self) -> List[Job]:
        with self._lock:
            return [replace(job) for job in self._jobs.values()]

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[Job]:
        """Block until `job_id` is finished; return its final snapshot."""
        with self._lock:
            finished = self._finished.get(job_id)
        if finished is None:
            return None
        finished.wait(timeout)
        return self.get(job_id)

    def _update(self, job_id: str, **changes) -> None:
        with self._lock:
            job = self._jobs[job_id]
            for key, value in changes.items():
                setattr(job, key, value)

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._run(item)
            finally:
                self._queue.task_done()

    def _run(self, job_id: str) -> None:
        with self._lock:
            job = self._jobs[job_id]
        self._update(job_id, status=JobStatus.RUNNING, started_at=_utcnow())
        logger.info("Job %s started", job_id)
        try:
            result = process_guest_list(job.poster_path, job.invites_path, settings=self.settings)
        except PosterServiceError as exc:
            logger.error("Job %s failed: %s", job_id, exc)
            self._update(job_id, status=JobStatus.FAILED, error=str(exc), finished_at=_utcnow())
        except Exception as exc:  # noqa: BLE001
            logger.exception("Job %s crashed: %s", job_id, exc)
            self._update(job_id, status=JobStatus.FAILED, error=str(exc), finished_at=_utcnow())
        else:
            self._update(
                job_id,
                status=JobStatus.SUCCEEDED,
                total=result.total,
                rendered=len(result.rendered),
                failed=len(result.failed),
                finished_at=_utcnow(),
            )
            logger.info(
                "Job %s succeeded rendered=%d failed=%d", job_id, len(result.rendered), len(result.failed)
            )
        finally:
            shutil.rmtree(self._job_dir(job_id), ignore_errors=True)
            self._finished[job_id].set()
            self._evict_finished()

    def _job_dir(self, job_id: str) -> Path:
        return Path(self.settings.uploads_dir) / JOBS_DIRNAME / job_id

    def _evict_finished(self) -> None:
        """Drop the oldest finished jobs beyond `max_finished_jobs`."""
        with self._lock:
            finished = [job_id for job_id, job in self._jobs.items() if job.done]
            for job_id in finished[: max(len(finished) - self.settings.max_finished_jobs, 0)]:
                del self._jobs[job_id]
                del self._finished[job_id]
