"""
FastAPI layer exposing guest poster generation.

Endpoints:
 - GET /health
 - POST /upload
 - GET /guests
 - GET /guest_posters/{filename}
 - GET /jobs
 - GET /jobs/{job_id}
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
import logging
import os
from pathlib import Path
import shutil
import tempfile
import threading
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from pydantic import BaseModel

from . import config
from .catalog import list_posters, write_summary
from .errors import ScanError
from .jobs import Job, JobQueue, JobStatus

logger = logging.getLogger(__name__)

STAGED_POSTER_NAME = "poster.png"
STAGED_INVITES_NAME = "invites.csv"

CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["X-Requested-With", "Content-Type", "Authorization"]


class UploadResponse(BaseModel):
    message: str
    job_id: str


class PosterRecordModel(BaseModel):
    id: int
    name: str
    full: str
    url: str


class JobResponse(BaseModel):
    id: str
    status: JobStatus
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total: int
    rendered: int
    failed: int
    error: Optional[str] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            status=job.status,
            created_at=job.created_at,
            started_at=job.started_at,
            finished_at=job.finished_at,
            total=job.total,
            rendered=job.rendered,
            failed=job.failed,
            error=job.error,
        )


def _write_startup_summary(settings: config.Settings) -> None:
    """Record the posters present at startup; a scan failure is not fatal."""
    try:
        records = list_posters(settings.output_dir, settings=settings)
        write_summary(records, Path(settings.output_dir) / settings.summary_filename)
    except (ScanError, OSError) as exc:
        logger.error("Could not write startup poster summary: %s", exc)


def _stage_upload(upload: UploadFile, uploads_dir: Path) -> Path:
    """Copy an upload into a scratch file in `uploads_dir` and return its path."""
    fd, tmp_name = tempfile.mkstemp(prefix=".staging-", dir=uploads_dir)
    try:
        with os.fdopen(fd, "wb") as out:
            shutil.copyfileobj(upload.file, out)
    except BaseException:
        _discard(Path(tmp_name))
        raise
    return Path(tmp_name)


def _discard(*paths: Optional[Path]) -> None:
    for path in paths:
        if path is not None:
            try:
                path.unlink()
            except FileNotFoundError:
                pass


def create_app(settings: Optional[config.Settings] = None) -> FastAPI:
    settings = settings or config.get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)
        Path(settings.output_dir).mkdir(parents=True, exist_ok=True)
        _write_startup_summary(settings)
        app.state.jobs.start()
        try:
            yield
        finally:
            app.state.jobs.shutdown()

    app = FastAPI(title="Guest Poster Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.jobs = JobQueue(settings)
    staging_lock = threading.Lock()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/upload", response_model=UploadResponse)
    def upload(
        request: Request,
        poster: Optional[UploadFile] = File(None),
        invites: Optional[UploadFile] = File(None),
    ):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.max_upload_bytes:
            return PlainTextResponse("Request body too large", status_code=413)
        if poster is None:
            return PlainTextResponse("Missing poster file", status_code=400)
        if invites is None:
            return PlainTextResponse("Missing invites list file", status_code=400)

        uploads_dir = Path(settings.uploads_dir)
        poster_path = uploads_dir / STAGED_POSTER_NAME
        invites_path = uploads_dir / STAGED_INVITES_NAME
        poster_tmp = invites_tmp = None
        try:
            uploads_dir.mkdir(parents=True, exist_ok=True)
            poster_tmp = _stage_upload(poster, uploads_dir)
            invites_tmp = _stage_upload(invites, uploads_dir)
            staged = poster_tmp.stat().st_size + invites_tmp.stat().st_size
            if staged > settings.max_upload_bytes:
                _discard(poster_tmp, invites_tmp)
                return PlainTextResponse("Request body too large", status_code=413)
            # The slot and the job's private copy must come from the same upload.
            with staging_lock:
                os.replace(poster_tmp, poster_path)
                os.replace(invites_tmp, invites_path)
                job = request.app.state.jobs.submit(poster_path, invites_path)
        except OSError as exc:
            _discard(poster_tmp, invites_tmp)
            logger.exception("Failed to stage upload: %s", exc)
            return PlainTextResponse("Could not store uploaded files", status_code=500)

        return UploadResponse(message="Files uploaded and processing in background", job_id=job.id)

    @app.get("/guests", response_model=List[PosterRecordModel])
    def guests():
        try:
            records = list_posters(settings.output_dir, settings=settings)
        except ScanError as exc:
            logger.error("Listing posters failed: %s", exc)
            raise HTTPException(status_code=500, detail="Could not list guest posters") from exc
        return [PosterRecordModel(**record.to_dict()) for record in records]

    @app.get("/guest_posters/{filename}")
    def guest_poster(filename: str):
        path = Path(settings.output_dir) / Path(filename).name
        if not path.is_file():
            raise HTTPException(status_code=404, detail="Poster not found")
        return FileResponse(path, media_type="image/png")

    @app.get("/jobs", response_model=List[JobResponse])
    def jobs(request: Request):
        return [JobResponse.from_job(job) for job in request.app.state.jobs.list()]

    @app.get("/jobs/{job_id}", response_model=JobResponse)
    def job_status(job_id: str, request: Request):
        job = request.app.state.jobs.get(job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="Job not found")
        return JobResponse.from_job(job)

    return app


settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = create_app(settings)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
