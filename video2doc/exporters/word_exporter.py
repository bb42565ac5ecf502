import io
import re
from datetime import datetime
from pathlib import Path

from docx import Document
from docx.shared import Inches

from ..pipeline.models import DocumentResult


_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_MARKS = re.compile(r"\*\*|`")


def _plain(text: str) -> str:
    return _MARKS.sub("", _LINK.sub(r"\1", text)).strip()


def export_word(result: DocumentResult, output_path: Path) -> Path:
    doc = Document()
    doc.add_paragraph(f"Source: {result.title or 'video'}")
    doc.add_paragraph(f"Duration: {result.metadata.duration}  Resolution: {result.metadata.resolution}")
    doc.add_paragraph(f"Language: {result.language}  Date: {datetime.now().strftime('%Y-%m-%d')}")

    for line in result.document.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("### "):
            doc.add_heading(_plain(stripped[4:]), level=3)
        elif stripped.startswith("## "):
            doc.add_heading(_plain(stripped[3:]), level=2)
        elif stripped.startswith("# "):
            doc.add_heading(_plain(stripped[2:]), level=1)
        elif stripped.startswith(("- ", "* ")):
            doc.add_paragraph(_plain(stripped[2:]), style="List Bullet")
        else:
            doc.add_paragraph(_plain(stripped))

    if result.frames:
        doc.add_heading("Key Visuals Gallery", level=2)
    for index, frame in enumerate(result.frames, start=1):
        doc.add_picture(io.BytesIO(frame.image), width=Inches(5.5))
        doc.add_paragraph(f"Frame {index} ({frame.id}) at {frame.timestamp:.1f}s")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(output_path)
    return output_path
