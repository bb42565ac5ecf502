from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..pipeline.models import DocumentResult
from ..utils.text import render_markdown


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "web" / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_document_html(result: DocumentResult) -> str:
    template = _env.get_template("export.html")
    return template.render(
        title=result.title or "Document",
        document_html=render_markdown(result.document),
        metadata=result.metadata,
        frames=result.frames,
        language=result.language,
    )


def export_html(result: DocumentResult, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_document_html(result), encoding="utf-8")
    return output_path
