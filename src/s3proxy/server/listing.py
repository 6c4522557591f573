"""HTML rendering of synthesized directory listings."""

import html
from typing import Iterable
from urllib.parse import quote

from ..filesystem.entries import DirEntry


def render_listing(entries: Iterable[DirEntry]) -> str:
    """Render entries as the minimal <pre> listing static file servers emit."""
    lines = [
        "<!doctype html>",
        '<meta name="viewport" content="width=device-width">',
        "<pre>",
    ]
    for entry in entries:
        lines.append(f'<a href="{html.escape(quote(entry.name))}">{html.escape(entry.name)}</a>')
    lines.append("</pre>")
    return "\n".join(lines) + "\n"
