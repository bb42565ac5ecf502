import argparse
import asyncio
import logging
from datetime import datetime
from pathlib import Path

from .config import configure_logging, get_settings
from .pipeline.errors import Video2DocError
from .pipeline.models import FileSource, UrlSource
from .pipeline.runner import PipelineFactory
from .exporters.markdown_exporter import export_markdown
from .exporters.html_exporter import export_html
from .exporters.word_exporter import export_word
from .utils.file import sanitize_filename


logger = logging.getLogger(__name__)

LANGUAGES = ["English", "Chinese", "Japanese"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Turn a video and its transcript into an illustrated document")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--video", help="Path to a local video file")
    source.add_argument("--url", help="Direct link to a video file")
    parser.add_argument("--transcript", required=True, help="Path to the transcript text file")
    parser.add_argument("--language", default="English", help=f"Output language, e.g. {', '.join(LANGUAGES)}")
    parser.add_argument("--name", help="Output folder name (defaults to the video name)")
    parser.add_argument(
        "--export",
        nargs="+",
        choices=["md", "html", "docx"],
        default=["md", "html"],
    )
    parser.add_argument("--output-dir", default="outputs", help="Output root directory")
    parser.add_argument("--tmp-dir", default="tmp", help="Temporary working directory")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    transcript = Path(args.transcript).read_text(encoding="utf-8")
    video_source = FileSource(Path(args.video)) if args.video else UrlSource(args.url)

    def _progress(step: str, message: str) -> None:
        print(f"[{step}] {message}")

    runner = PipelineFactory(settings).create(show_progress=True)
    try:
        result = asyncio.run(
            runner.run(
                source=video_source,
                transcript=transcript,
                language=args.language,
                tmp_root=Path(args.tmp_dir),
                on_progress=_progress,
            )
        )
    except Video2DocError as exc:
        logger.error("run failed: %s", exc)
        raise SystemExit(f"Failed to generate document: {exc}")

    date_prefix = datetime.now().strftime("%Y-%m-%d")
    safe_name = sanitize_filename(args.name or result.title) or "document"
    output_dir = Path(args.output_dir) / f"{date_prefix}_{safe_name}"
    output_dir.mkdir(parents=True, exist_ok=True)
    if "md" in args.export:
        export_markdown(result, output_dir)
    if "html" in args.export:
        export_html(result, output_dir / f"{safe_name}.html")
    if "docx" in args.export:
        export_word(result, output_dir / f"{safe_name}.docx")

    print(f"Done. {len(result.frames)} frames, {result.metadata.duration}, {result.metadata.resolution}")
    print(f"Output: {output_dir}")


if __name__ == "__main__":
    main()
