from collections import OrderedDict

from fastapi.testclient import TestClient

from video2doc.pipeline.errors import EmptyResultError
from video2doc.pipeline.models import DocumentResult, ExtractedFrame, UrlSource, VideoMetadata
from video2doc.web import app as web_app


client = TestClient(web_app.app)


class _Factory:
    def __init__(self, runner):
        self.runner = runner

    def __call__(self, settings):
        return self

    def create(self):
        return self.runner


class _Runner:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    async def run(self, source, transcript, language, tmp_root, on_progress=None):
        on_progress(step="generate", message="Generating document...")
        if self.error:
            raise self.error
        return self.result


def _job(job_id, **overrides):
    job = {
        "id": job_id,
        "source": UrlSource("https://example.com/talk.mp4"),
        "transcript": "Hello world",
        "language": "English",
        "export_md": True,
        "export_html": True,
        "export_docx": False,
    }
    job.update(overrides)
    return job


def test_index_page_lists_languages():
    response = client.get("/")
    assert response.status_code == 200
    assert "Paste Transcript" in response.text
    for language in ("English", "Chinese", "Japanese"):
        assert f'<option value="{language}">' in response.text


def test_blank_transcript_is_rejected():
    response = client.post("/run", data={"transcript": " ", "input_type": "url", "url": "https://x/a.mp4"})
    assert response.status_code == 200
    assert "Please provide a transcript." in response.text


def test_missing_url_is_rejected():
    response = client.post("/run", data={"transcript": "Hello", "input_type": "url", "url": ""})
    assert "Please enter a video URL." in response.text


def test_unknown_job_and_result():
    assert client.get("/api/jobs/nope").status_code == 404
    assert client.get("/result/nope").status_code == 404


def test_finished_job_exports_and_renders(monkeypatch, tmp_path):
    result = DocumentResult(
        document="# Talk\n\n## Key Visuals\n- [Frame 1](#frame-1)",
        frames=(ExtractedFrame(id="frame-1", image=b"\xff\xd8jpeg", timestamp=1.0),),
        metadata=VideoMetadata(duration="10s", resolution="640x360"),
        language="English",
        title="talk",
    )
    monkeypatch.setattr(web_app, "OUTPUT_ROOT", tmp_path)
    monkeypatch.setattr(web_app, "get_settings", lambda: None)
    monkeypatch.setattr(web_app, "PipelineFactory", _Factory(_Runner(result=result)))

    web_app._run_job("job-ok", _job("job-ok"))

    status = client.get("/api/jobs/job-ok").json()
    assert status["status"] == "done"
    assert status["frames"] == 1
    assert status["metadata"] == {"duration": "10s", "resolution": "640x360"}
    assert status["exports"] == ["document.md", "talk.html"]
    assert "source" not in status

    page = client.get("/result/job-ok")
    assert page.status_code == 200
    assert 'id="frame-1"' in page.text
    assert '<a href="#frame-1">Frame 1</a>' in page.text

    download = client.get(f"/download/{status['output_dir']}/talk.html")
    assert download.status_code == 200


def test_failed_job_reports_user_facing_error(monkeypatch):
    monkeypatch.setattr(web_app, "get_settings", lambda: None)
    error = EmptyResultError("Could not extract any frames from the video. Please try a different video file.")
    monkeypatch.setattr(web_app, "PipelineFactory", _Factory(_Runner(error=error)))

    web_app._run_job("job-bad", _job("job-bad"))

    status = client.get("/api/jobs/job-bad").json()
    assert status["status"] == "error"
    assert status["error"].startswith("Failed to generate document: Could not extract any frames")


def test_only_recent_results_are_kept(monkeypatch):
    monkeypatch.setattr(web_app, "RESULTS", OrderedDict())
    monkeypatch.setattr(web_app, "MAX_RESULTS", 2)
    result = DocumentResult(
        document="# Talk",
        frames=(),
        metadata=VideoMetadata(duration="10s", resolution="640x360"),
        language="English",
    )

    for job_id in ("old", "middle", "new"):
        web_app._store_result(job_id, result)

    assert list(web_app.RESULTS) == ["middle", "new"]
    assert client.get("/result/old").status_code == 404
    assert client.get("/result/new").status_code == 200
