"""In-place patching of the generated ``index.html``.

The document is reduced to the few structures the patch touches: the
``<head>`` opening tag, every ``<title>`` element, previously inserted Google
Fonts links, and the ``<html>`` opening tag. Patching is repeatable: applying
it to its own output yields the same text.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from pathlib import Path

from steampunk_setup.errors import MarkupFileMissing, MarkupMalformed

_HEAD_OPEN_PATTERN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
_HTML_OPEN_PATTERN = re.compile(r"<html\b([^>]*)>", re.IGNORECASE)
_TITLE_PATTERN = re.compile(
    r"(^[ \t]*)?<title\b[^>]*>.*?</title\s*>([ \t]*\r?\n)?",
    re.IGNORECASE | re.DOTALL | re.MULTILINE,
)
_FONT_LINK_PATTERN = re.compile(
    r"(^[ \t]*)?<link\b[^>]*href\s*=\s*[\"']https://fonts\.(?:googleapis|gstatic)\.com[^\"']*[\"'][^>]*>"
    r"([ \t]*\r?\n)?",
    re.IGNORECASE | re.MULTILINE,
)
_CLASS_ATTR_PATTERN = re.compile(r"""\bclass\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)

GOOGLE_FONTS_CSS = "https://fonts.googleapis.com/css2"
DARK_MODE_CLASS = "dark"
INDENT = "  "


@dataclass
class HtmlDocument:
    """Spans of the structures the patch cares about."""

    text: str
    head_open: tuple[int, int] | None = None
    html_open: tuple[int, int] | None = None
    titles: list[tuple[int, int]] = field(default_factory=list)
    font_links: list[tuple[int, int]] = field(default_factory=list)


def parse_document(text: str) -> HtmlDocument:
    head = _HEAD_OPEN_PATTERN.search(text)
    root = _HTML_OPEN_PATTERN.search(text)
    return HtmlDocument(
        text=text,
        head_open=head.span() if head else None,
        html_open=root.span() if root else None,
        titles=[m.span() for m in _TITLE_PATTERN.finditer(text)],
        font_links=[m.span() for m in _FONT_LINK_PATTERN.finditer(text)],
    )


def font_link_tags(fonts: list[str]) -> list[str]:
    """Preconnect hints plus one stylesheet link per font family."""
    tags = [
        '<link rel="preconnect" href="https://fonts.googleapis.com">',
        '<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>',
    ]
    for font in fonts:
        family = "+".join(font.split())
        tags.append(
            f'<link href="{GOOGLE_FONTS_CSS}?family={html.escape(family)}&display=swap" rel="stylesheet">'
        )
    return tags


def _strip_element(match: re.Match[str]) -> str:
    # An element alone on its line takes the whole line with it; an inline
    # element leaves the surrounding line intact.
    if match.group(1) is not None and match.group(2) is not None:
        return ""
    return match.group(2) or ""


def _add_class(match: re.Match[str], class_name: str) -> str:
    attrs = match.group(1)
    class_attr = _CLASS_ATTR_PATTERN.search(attrs)
    if class_attr is None:
        return f'<html{attrs.rstrip()} class="{class_name}">'
    classes = class_attr.group(2).split()
    if class_name in classes:
        return match.group(0)
    quote = class_attr.group(1)
    new_attr = f"class={quote}{' '.join([*classes, class_name])}{quote}"
    attrs = attrs[: class_attr.start()] + new_attr + attrs[class_attr.end() :]
    return f"<html{attrs}>"


def _line_indent(text: str, pos: int) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    prefix = text[line_start:pos]
    return prefix if not prefix.strip() else ""


def patch_index_html(text: str, app_name: str, fonts: list[str]) -> str:
    """Return *text* with fonts, a single ``<title>`` and dark mode applied.

    Raises:
        MarkupMalformed: If the document has no ``<head>`` opening tag.
    """
    text = _TITLE_PATTERN.sub(_strip_element, text)
    text = _FONT_LINK_PATTERN.sub(_strip_element, text)

    doc = parse_document(text)
    if doc.head_open is None:
        raise MarkupMalformed("index.html has no <head> element to insert fonts and title into")

    start, end = doc.head_open
    indent = _line_indent(text, start) + INDENT
    lines = [*font_link_tags(fonts), f"<title>{html.escape(app_name)}</title>"]
    block = "".join(f"\n{indent}{line}" for line in lines)
    text = text[:end] + block + text[end:]

    return _HTML_OPEN_PATTERN.sub(lambda m: _add_class(m, DARK_MODE_CLASS), text, count=1)


def patch_index_file(path: str | Path, app_name: str, fonts: list[str]) -> Path:
    """Patch the markup file at *path* in place.

    Raises:
        MarkupFileMissing: If *path* does not exist.
        MarkupMalformed: If the file has no ``<head>`` element.
    """
    target = Path(path)
    if not target.is_file():
        raise MarkupFileMissing(
            f"{target} not found. Could not insert Google Fonts links or set <title> to {app_name}."
        )
    patched = patch_index_html(target.read_text(encoding="utf-8"), app_name, fonts)
    with target.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(patched)
    return target
