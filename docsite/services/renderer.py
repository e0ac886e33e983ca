"""Thin adapter around Python-Markdown plus a minimal HTML page shell.

Only what the builder and the preview server need: front matter removal,
first-heading titles, wikilink conversion before rendering, and an HTML
document with breadcrumbs, prev/next links and an inline broken-link panel.
"""

import re
from html import escape
from typing import List, Optional

import markdown

from docsite.models.broken_link import BrokenLink
from docsite.services.navigation import Breadcrumb, PageNavigation
from docsite.services.wikilinks import convert_wikilinks

_MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

_H1_RE = re.compile(r"^#\s+(.+?)\s*#*$")
_INLINE_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_INLINE_MARKUP_RE = re.compile(r"[*_~`]")


def read_source(source_path: str) -> str:
    with open(source_path, encoding="utf-8", errors="replace") as handle:
        return handle.read()


def strip_front_matter(text: str) -> str:
    """Remove a leading ``---`` delimited front matter block, if present."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != "---":
        return text
    for number, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "".join(lines[number + 1 :])
    return text


def extract_h1(text: str) -> str:
    """Return the first-level heading that opens the document, or ``""``.

    Only the first non-empty line after front matter is considered.
    """
    for line in strip_front_matter(text).splitlines():
        line = line.strip()
        if not line:
            continue
        match = _H1_RE.match(line)
        if not match:
            return ""
        title = _INLINE_LINK_RE.sub(r"\1", match.group(1))
        return _INLINE_MARKUP_RE.sub("", title).strip()
    return ""


def render_markdown(text: str, source_dir: str = "/") -> str:
    """Render a page body to HTML, resolving wikilinks against *source_dir*."""
    body = convert_wikilinks(strip_front_matter(text), source_dir)
    return markdown.markdown(body, extensions=_MARKDOWN_EXTENSIONS, output_format="html")


def render_broken_links_panel(broken_links: List[BrokenLink]) -> str:
    if not broken_links:
        return ""
    items = []
    for link in broken_links:
        location = escape(link.source_file or link.source_page)
        if link.line_number:
            location += f":{link.line_number}"
        item = f"<li><code>{escape(link.link_url)}</code> in <code>{location}</code>"
        if link.original_syntax:
            item += f" <code>{escape(link.original_syntax)}</code>"
        if link.suggestions:
            suggestions = ", ".join(
                f'<a href="{escape(url)}">{escape(url)}</a>' for url in link.suggestions
            )
            item += f"<br>Did you mean: {suggestions}"
        items.append(item + "</li>")
    return (
        '<aside class="broken-links-warning" role="alert">'
        f"<strong>{len(broken_links)} broken internal link(s)</strong>"
        f'<ul class="broken-links-list">{"".join(items)}</ul>'
        "</aside>"
    )


def _render_breadcrumbs(crumbs: List[Breadcrumb]) -> str:
    if len(crumbs) < 2:
        return ""
    parts = []
    for crumb in crumbs:
        if crumb.url and not crumb.current:
            parts.append(f'<a href="{escape(crumb.url)}">{escape(crumb.label)}</a>')
        else:
            parts.append(f'<span aria-current="page">{escape(crumb.label)}</span>')
    return f'<nav class="breadcrumbs">{" / ".join(parts)}</nav>'


def _render_page_nav(nav: Optional[PageNavigation]) -> str:
    if nav is None or (nav.previous is None and nav.next is None):
        return ""
    parts = []
    if nav.previous is not None:
        parts.append(f'<a class="prev" rel="prev" href="{escape(nav.previous.url)}">{escape(nav.previous.title)}</a>')
    if nav.next is not None:
        parts.append(f'<a class="next" rel="next" href="{escape(nav.next.url)}">{escape(nav.next.title)}</a>')
    return f'<nav class="page-nav">{"".join(parts)}</nav>'


def render_page(
    *,
    title: str,
    content: str,
    site_title: str,
    breadcrumbs: Optional[List[Breadcrumb]] = None,
    page_nav: Optional[PageNavigation] = None,
    broken_links: Optional[List[BrokenLink]] = None,
) -> str:
    """Wrap rendered *content* into a complete HTML document."""
    page_title = site_title if title == site_title else f"{title} | {site_title}"
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(page_title)}</title>\n"
        "</head>\n"
        "<body>\n"
        f'<header><a class="site-title" href="/">{escape(site_title)}</a></header>\n'
        f"{_render_breadcrumbs(breadcrumbs or [])}\n"
        f"{render_broken_links_panel(broken_links or [])}\n"
        f"<main>\n{content}\n</main>\n"
        f"{_render_page_nav(page_nav)}\n"
        "</body>\n"
        "</html>\n"
    )
