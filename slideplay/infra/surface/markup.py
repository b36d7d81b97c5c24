"""
Markup adapters between standalone slide documents and the rendering surface.

Slides are authored as complete HTML documents with ``:root`` and ``body``
selectors. On the isolated surface those selectors would not match, so CSS is
re-scoped on attach and restored before anything is persisted.
"""

import re

from bs4 import BeautifulSoup

RUNTIME_STYLE_ATTR = "data-shadow-animations"
EDIT_MARKER_CLASSES = ("editable-active", "editable-hover")
ANIMATION_CLASSES = ("animation-hidden", "animation-visible", "animation-instant")

_STYLE_BLOCK = re.compile(r"(<style[^>]*>)([\s\S]*?)(</style>)", re.IGNORECASE)
_DOCTYPE = re.compile(r"^\s*<!DOCTYPE\s", re.IGNORECASE)
_RUNTIME_STYLE = re.compile(
    r'<style\s+data-shadow-animations(?:="")?[^>]*>[\s\S]*?</style>', re.IGNORECASE
)
_HEAD_PATTERNS = (
    re.compile(r"<meta\b[^>]*/?>", re.IGNORECASE),
    re.compile(r"<title\b[^>]*>[\s\S]*?</title>", re.IGNORECASE),
    re.compile(r"<link\b[^>]*/?>", re.IGNORECASE),
    re.compile(r"<style\b[^>]*>[\s\S]*?</style>", re.IGNORECASE),
)


def _rewrite_styles(html: str, rewrite) -> str:
    return _STYLE_BLOCK.sub(
        lambda m: m.group(1) + rewrite(m.group(2)) + m.group(3), html
    )


def adapt_css_for_surface(html: str) -> str:
    """``:root {`` → ``:host {`` and ``body {`` → ``.slide, [data-slide-id] {`` inside <style>."""

    def rewrite(css: str) -> str:
        css = re.sub(r":root\s*\{", ":host {", css)
        return re.sub(r"\bbody\s*\{", ".slide, [data-slide-id] {", css)

    return _rewrite_styles(html, rewrite)


def reverse_adapt_css_for_surface(html: str) -> str:
    """Inverse of :func:`adapt_css_for_surface`."""

    def rewrite(css: str) -> str:
        css = re.sub(r":host\s*\{", ":root {", css)
        return re.sub(r"\.slide,\s*\[data-slide-id\]\s*\{", "body {", css)

    return _rewrite_styles(html, rewrite)


def wrap_as_html_document(html: str) -> str:
    """Wrap a surface fragment into a standalone HTML5 document.

    Documents that already start with a doctype are returned unchanged.
    """
    if _DOCTYPE.match(html):
        return html

    working = _RUNTIME_STYLE.sub("", html)
    head_elements: list[str] = []

    def hoist(match: re.Match) -> str:
        head_elements.append(match.group(0))
        return ""

    for pattern in _HEAD_PATTERNS:
        working = pattern.sub(hoist, working)

    head = "\n".join(head_elements)
    body = working.strip()
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        f"{head}\n"
        "</head>\n"
        "<body>\n"
        f"{body}\n"
        "</body>\n"
        "</html>"
    )


def strip_transient_markers(fragment: BeautifulSoup) -> BeautifulSoup:
    """Remove editing and animation artifacts in place."""
    for element in fragment.select("[contenteditable]"):
        del element["contenteditable"]

    transient = EDIT_MARKER_CLASSES + ANIMATION_CLASSES
    for element in fragment.find_all(class_=True):
        classes = [c for c in element.get("class", []) if c not in transient]
        if classes:
            element["class"] = classes
        else:
            del element["class"]

    for style in fragment.find_all("style", attrs={RUNTIME_STYLE_ATTR: True}):
        style.decompose()
    return fragment


def to_portable_document(fragment_html: str) -> str:
    """Serialize surface content into the form persisted to disk."""
    fragment = strip_transient_markers(BeautifulSoup(fragment_html, "html.parser"))
    restored = reverse_adapt_css_for_surface(str(fragment))
    return wrap_as_html_document(restored)
