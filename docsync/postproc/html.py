"""Static HTML rendering of the documentation store."""

from __future__ import annotations

from html import escape
from typing import List

from ..models import ProjectDocumentation

_STYLE = (
    "body{font-family:system-ui,sans-serif;margin:2rem auto;max-width:60rem;color:#222}"
    "nav li{margin:.2rem 0}section{border-top:1px solid #ddd;padding-top:1rem;margin-top:1.5rem}"
    "pre{background:#f6f8fa;padding:1rem;overflow-x:auto}.meta{color:#666;font-size:.85rem}"
)


def _anchor(path: str) -> str:
    return "file-" + "".join(char if char.isalnum() else "-" for char in path)


def render_html(doc: ProjectDocumentation, *, title: str = "Project documentation") -> str:
    """Render every artifact as one self-contained page, sorted by path."""
    paths = sorted(doc.files)
    lines: List[str] = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(title)}</title>",
        f"<style>{_STYLE}</style>",
        "</head>",
        "<body>",
        f"<h1>{escape(title)}</h1>",
        f'<p class="meta">Last updated {escape(doc.last_updated)} &middot; {len(paths)} file(s)</p>',
    ]
    if paths:
        lines.append("<nav><ul>")
        for path in paths:
            lines.append(f'<li><a href="#{_anchor(path)}">{escape(path)}</a></li>')
        lines.append("</ul></nav>")

    for path in paths:
        artifact = doc.files[path]
        lines.extend(
            [
                f'<section id="{_anchor(path)}">',
                f"<h2>{escape(path)}</h2>",
                f'<p class="meta">{escape(artifact.type)} &middot; updated {escape(artifact.last_updated)}</p>',
                f"<p>{escape(artifact.summary)}</p>",
                f"<pre><code>{escape(artifact.content)}</code></pre>",
                "</section>",
            ]
        )

    lines.extend(["</body>", "</html>"])
    return "\n".join(lines) + "\n"


__all__ = ["render_html"]
