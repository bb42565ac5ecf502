import json
from pathlib import Path

from ..pipeline.models import DocumentResult


def _gallery(result: DocumentResult) -> list[str]:
    lines = ["", "---", "", "## Key Visuals Gallery", ""]
    for frame in result.frames:
        lines.append(f'<a id="{frame.id}"></a>')
        lines.append(f"![{frame.id} at {frame.timestamp:.1f}s](frames/{frame.id}.jpg)")
        lines.append("")
    return lines


def export_markdown(result: DocumentResult, output_dir: Path) -> Path:
    frames_dir = output_dir / "frames"
    frames_dir.mkdir(parents=True, exist_ok=True)
    for frame in result.frames:
        (frames_dir / f"{frame.id}.jpg").write_bytes(frame.image)

    metadata = {
        "title": result.title,
        "language": result.language,
        "duration": result.metadata.duration,
        "resolution": result.metadata.resolution,
        "frames": [{"id": f.id, "timestamp": round(f.timestamp, 3)} for f in result.frames],
    }
    (output_dir / "metadata.json").write_text(
        json.dumps(metadata, ensure_ascii=False, indent=2), encoding="utf-8"
    )

    document_path = output_dir / "document.md"
    lines = [result.document.rstrip(), *_gallery(result)]
    document_path.write_text("\n".join(lines), encoding="utf-8")
    return document_path
