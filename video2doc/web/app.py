from __future__ import annotations

import asyncio
from collections import OrderedDict
from datetime import datetime
from pathlib import Path
import logging
import queue
import threading
import uuid

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from ..config import configure_logging, get_settings
from ..pipeline.errors import Video2DocError
from ..pipeline.models import DocumentResult, FileSource, UrlSource
from ..pipeline.runner import PipelineFactory
from ..exporters.markdown_exporter import export_markdown
from ..exporters.html_exporter import export_html
from ..exporters.word_exporter import export_word
from ..utils.file import sanitize_filename
from ..utils.text import render_markdown


BASE_DIR = Path(__file__).resolve().parent
TEMPLATES = Jinja2Templates(directory=str(BASE_DIR / "templates"))
STATIC_DIR = BASE_DIR / "static"
OUTPUT_ROOT = Path("outputs")
TMP_ROOT = Path("tmp")
LANGUAGES = ["English", "Chinese", "Japanese"]

logger = logging.getLogger(__name__)

app = FastAPI(title="Video to Document")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

JOB_QUEUE: "queue.Queue[str]" = queue.Queue()
JOBS: dict[str, dict] = {}
MAX_RESULTS = 20
RESULTS: "OrderedDict[str, DocumentResult]" = OrderedDict()
JOBS_LOCK = threading.Lock()


def _update_job(job_id: str, **updates) -> None:
    with JOBS_LOCK:
        job = JOBS.get(job_id, {})
        job.update(updates)
        JOBS[job_id] = job


def _store_result(job_id: str, result: DocumentResult) -> None:
    # results hold every frame image, so only the most recent jobs stay viewable
    with JOBS_LOCK:
        RESULTS[job_id] = result
        RESULTS.move_to_end(job_id)
        while len(RESULTS) > MAX_RESULTS:
            RESULTS.popitem(last=False)


def _export(job: dict, result: DocumentResult) -> tuple[str, list[str]]:
    date_prefix = datetime.now().strftime("%Y-%m-%d")
    safe_name = sanitize_filename(result.title) or "document"
    output_dir = OUTPUT_ROOT / f"{date_prefix}_{safe_name}_{job['id'][:8]}"
    output_dir.mkdir(parents=True, exist_ok=True)
    exports: list[str] = []
    if job["export_md"]:
        exports.append(export_markdown(result, output_dir).name)
    if job["export_html"]:
        exports.append(export_html(result, output_dir / f"{safe_name}.html").name)
    if job["export_docx"]:
        exports.append(export_word(result, output_dir / f"{safe_name}.docx").name)
    return output_dir.name, exports


def _run_job(job_id: str, job: dict) -> None:
    def _progress(step: str, message: str) -> None:
        _update_job(job_id, progress={"step": step, "message": message})

    source = job["source"]
    try:
        runner = PipelineFactory(get_settings()).create()
        result = asyncio.run(
            runner.run(
                source=source,
                transcript=job["transcript"],
                language=job["language"],
                tmp_root=TMP_ROOT,
                on_progress=_progress,
            )
        )
        _store_result(job_id, result)
        output_dir, exports = _export(job, result)
        _update_job(
            job_id,
            status="done",
            output_dir=output_dir,
            exports=exports,
            frames=len(result.frames),
            metadata={"duration": result.metadata.duration, "resolution": result.metadata.resolution},
            progress={"step": "done", "message": "Document ready"},
            finished_at=datetime.now().isoformat(),
        )
    except (Video2DocError, ValueError) as exc:
        logger.error("job %s failed: %s", job_id, exc)
        _update_job(
            job_id,
            status="error",
            error=f"Failed to generate document: {exc}",
            progress={"step": "error", "message": "Failed"},
        )
    finally:
        if isinstance(source, FileSource) and job.get("uploaded"):
            Path(source.path).unlink(missing_ok=True)


def _worker() -> None:
    while True:
        job_id = JOB_QUEUE.get()
        job = JOBS.get(job_id)
        if not job:
            JOB_QUEUE.task_done()
            continue
        _update_job(job_id, status="running")
        try:
            _run_job(job_id, job)
        except Exception:
            logger.exception("job %s crashed", job_id)
            _update_job(
                job_id,
                status="error",
                error="Failed to generate document: An unknown error occurred.",
                progress={"step": "error", "message": "Failed"},
            )
        finally:
            JOB_QUEUE.task_done()


@app.on_event("startup")
def _start_worker() -> None:
    configure_logging()
    thread = threading.Thread(target=_worker, daemon=True)
    thread.start()


def _index(request: Request, error: str | None = None) -> HTMLResponse:
    return TEMPLATES.TemplateResponse(
        request,
        "index.html",
        {"languages": LANGUAGES, "error": error},
    )


@app.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    return _index(request)


@app.post("/run", response_class=HTMLResponse)
async def run_generation(
    request: Request,
    transcript: str = Form(""),
    input_type: str = Form("file"),
    url: str = Form(""),
    language: str = Form("English"),
    file: UploadFile | None = File(None),
    export_md: bool = Form(False),
    export_html: bool = Form(False),
    export_docx: bool = Form(False),
) -> HTMLResponse:
    if not transcript.strip():
        return _index(request, "Please provide a transcript.")

    uploaded = False
    if input_type == "url":
        if not url.strip():
            return _index(request, "Please enter a video URL.")
        source = UrlSource(url.strip())
    else:
        if not file or not file.filename:
            return _index(request, "Please upload a video file.")
        if not (file.content_type or "").startswith("video/"):
            return _index(request, "Please upload a valid video file.")
        safe_name = sanitize_filename(file.filename) or "upload"
        TMP_ROOT.mkdir(parents=True, exist_ok=True)
        tmp_path = TMP_ROOT / f"upload_{uuid.uuid4().hex[:8]}_{safe_name}"
        with tmp_path.open("wb") as f:
            f.write(await file.read())
        source = FileSource(path=tmp_path, mime_type=file.content_type, filename=file.filename)
        uploaded = True

    if not export_md and not export_html and not export_docx:
        export_html = True

    job_id = str(uuid.uuid4())
    _update_job(
        job_id,
        id=job_id,
        status="queued",
        source=source,
        uploaded=uploaded,
        transcript=transcript,
        language=language,
        export_md=export_md,
        export_html=export_html,
        export_docx=export_docx,
        created_at=datetime.now().isoformat(),
        progress={"step": "queued", "message": "Queued"},
    )
    JOB_QUEUE.put(job_id)

    return TEMPLATES.TemplateResponse(
        request,
        "progress.html",
        {"job_id": job_id},
    )


_PUBLIC_FIELDS = ("status", "progress", "error", "output_dir", "exports", "frames", "metadata", "created_at", "finished_at")


@app.get("/api/jobs/{job_id}", response_class=JSONResponse)
def job_status(job_id: str) -> JSONResponse:
    job = JOBS.get(job_id)
    if not job:
        return JSONResponse({"status": "not_found"}, status_code=404)
    return JSONResponse({key: job[key] for key in _PUBLIC_FIELDS if key in job})


@app.get("/result/{job_id}", response_class=HTMLResponse)
def result_view(request: Request, job_id: str) -> HTMLResponse:
    with JOBS_LOCK:
        result = RESULTS.get(job_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    job = JOBS.get(job_id, {})
    return TEMPLATES.TemplateResponse(
        request,
        "result.html",
        {
            "result": result,
            "metadata": result.metadata,
            "frames": result.frames,
            "document_html": render_markdown(result.document),
            "output_dir": job.get("output_dir"),
            "exports": job.get("exports", []),
        },
    )


@app.get("/download/{batch}/{filename}")
def download_file(batch: str, filename: str) -> FileResponse:
    file_path = (OUTPUT_ROOT / batch / filename).resolve()
    root = OUTPUT_ROOT.resolve()
    if not file_path.exists() or not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    if not file_path.is_relative_to(root):
        raise HTTPException(status_code=400, detail="Invalid path")
    return FileResponse(path=file_path, filename=filename)
