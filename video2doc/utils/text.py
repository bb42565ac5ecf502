import html
import re


_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_BULLET = re.compile(r"^\s*[-*]\s+")
_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
_SAFE_HREF = re.compile(r"^(#|https?://)", re.IGNORECASE)


def _link(match: re.Match) -> str:
    # only in-page anchors and web links become <a>; the rest stays as text
    if not _SAFE_HREF.match(match.group(2)):
        return match.group(0)
    href = match.group(2).replace('"', "&quot;")
    return f'<a href="{href}">{match.group(1)}</a>'


def _inline(text: str) -> str:
    escaped = html.escape(text, quote=False)
    escaped = _CODE.sub(r"<code>\1</code>", escaped)
    escaped = _LINK.sub(_link, escaped)
    return _BOLD.sub(r"<strong>\1</strong>", escaped)


def render_markdown(markdown: str) -> str:
    """Small markdown subset: headings, bullet lists, paragraphs and inline marks."""
    parts: list[str] = []
    in_list = False
    for line in markdown.splitlines():
        if _BULLET.match(line):
            if not in_list:
                parts.append("<ul>")
                in_list = True
            parts.append(f"<li>{_inline(_BULLET.sub('', line, count=1))}</li>")
            continue
        if in_list:
            parts.append("</ul>")
            in_list = False
        if not line.strip():
            continue
        heading = _HEADING.match(line)
        if heading:
            level = len(heading.group(1))
            parts.append(f"<h{level}>{_inline(heading.group(2))}</h{level}>")
        else:
            parts.append(f"<p>{_inline(line)}</p>")
    if in_list:
        parts.append("</ul>")
    return "\n".join(parts)
