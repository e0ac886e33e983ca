"""Internal link validation for rendered pages.

A link is internal when its ``href`` is root-relative (starts with ``/``
but not ``//``).  Every internal link must land on a page, an auto-indexed
folder or the site root; anything else becomes a :class:`BrokenLink`,
enriched with the line and syntax of the link in the markup source when it
can be found there.
"""

import logging
import os
import re
from typing import Dict, Iterable, List, NamedTuple, Set, Tuple
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup

from docsite.models.broken_link import BrokenLink
from docsite.models.node import Site
from docsite.services.autoindex import folders_needing_auto_index
from docsite.services.slugs import folder_url, url_for
from docsite.services.suggestions import suggest_urls
from docsite.services.wikilinks import ATTACHMENT_EXTENSIONS, iter_wikilinks, resolve_wikilink

logger = logging.getLogger(__name__)

# Links to these are served as files, not pages, and are not validated.
_ASSET_EXTENSIONS = ATTACHMENT_EXTENSIONS | {
    ".css", ".js", ".map", ".json", ".xml", ".txt", ".csv",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
}

# Standard Markdown links: [text](/url "optional title")
_MD_LINK_RE = re.compile(r"(?<!!)\[([^\]]+)\]\((/[^)\s]*)(?:\s+\"[^\"]*\")?\)")


class LinkSource(NamedTuple):
    line_number: int
    syntax: str
    text: str


class RenderedPage(NamedTuple):
    """One rendered page, as handed to the site-wide validator."""

    url: str
    source_file: str  # path relative to the content root
    source_dir: str  # URL of the containing folder, for wikilink resolution
    markdown: str
    html: str


def build_valid_urls(site: Site) -> Set[str]:
    """Every URL an internal link may point at."""
    valid = {"/"}
    valid.update(url_for(page.path) for page in site.all_pages)
    valid.update(folder_url(folder.path) for folder in folders_needing_auto_index(site))
    return valid


def normalize_link(href: str) -> str:
    """Drop query and fragment; give extension-less paths a trailing slash."""
    path = unquote(urlsplit(href).path) or "/"
    last = path.rstrip("/").rsplit("/", 1)[-1]
    if not path.endswith("/") and "." not in last:
        path += "/"
    return path


def is_asset_link(href: str) -> bool:
    path = urlsplit(href).path
    return os.path.splitext(path)[1].lower() in _ASSET_EXTENSIONS


def extract_internal_links(html: str) -> List[Tuple[str, str]]:
    """Return ``(href, text)`` for each distinct root-relative link in *html*."""
    soup = BeautifulSoup(html, "lxml")
    seen: Set[str] = set()
    links: List[Tuple[str, str]] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href.startswith("/") or href.startswith("//"):
            continue
        if href == "/" or href.startswith("/#") or href in seen:
            continue
        seen.add(href)
        links.append((href, anchor.get_text(strip=True)))
    return links


def collect_link_sources(markdown: str, source_dir: str = "/") -> Dict[str, LinkSource]:
    """Map normalized link URLs to where they were written in *markdown*.

    Wikilinks are resolved exactly as the renderer resolves them, so their
    URLs match the hrefs found in the rendered HTML.  The first occurrence of
    a URL wins.
    """
    sources: Dict[str, LinkSource] = {}
    if not markdown:
        return sources

    for link in iter_wikilinks(markdown):
        url = normalize_link(resolve_wikilink(link.target, source_dir))
        sources.setdefault(url, LinkSource(link.line_number, link.syntax, link.label))

    for number, line in enumerate(markdown.splitlines(), start=1):
        for match in _MD_LINK_RE.finditer(line):
            url = normalize_link(match.group(2))
            sources.setdefault(url, LinkSource(number, match.group(0), match.group(1)))

    return sources


def _is_valid(link: str, valid_urls: Set[str]) -> bool:
    normalized = normalize_link(link)
    if normalized in valid_urls:
        return True
    without_slash = normalized.rstrip("/") or "/"
    return without_slash in valid_urls or without_slash + "/" in valid_urls


def validate_page_links(
    html: str,
    source_page: str,
    valid_urls: Set[str],
    *,
    source_file: str = "",
    markdown: str = "",
    source_dir: str = "/",
) -> List[BrokenLink]:
    """Check the internal links of one rendered page.

    Args:
        html:        Rendered HTML of the page body.
        source_page: Canonical URL of the page.
        valid_urls:  Result of :func:`build_valid_urls`.
        source_file: Path of the markup file, for reporting.
        markdown:    Markup source, used to recover line numbers and syntax.
        source_dir:  URL of the page's folder, used to resolve wikilinks.
    """
    sources = collect_link_sources(markdown, source_dir)
    broken: List[BrokenLink] = []

    for href, text in extract_internal_links(html):
        if is_asset_link(href) or _is_valid(href, valid_urls):
            continue
        source = sources.get(normalize_link(href))
        broken.append(
            BrokenLink(
                source_page=source_page,
                source_file=source_file,
                line_number=source.line_number if source else 0,
                link_url=href,
                original_syntax=source.syntax if source else "",
                link_text=source.text if source else text,
                suggestions=suggest_urls(normalize_link(href), valid_urls - {"/"}),
            )
        )

    return broken


def validate_site(pages: Iterable[RenderedPage], valid_urls: Set[str]) -> List[BrokenLink]:
    """Validate every rendered page and return all broken links in page order."""
    broken: List[BrokenLink] = []
    for page in pages:
        broken.extend(
            validate_page_links(
                page.html,
                page.url,
                valid_urls,
                source_file=page.source_file,
                markdown=page.markdown,
                source_dir=page.source_dir,
            )
        )
    logger.debug("Validated internal links: %d broken", len(broken))
    return broken


def format_broken_link(link: BrokenLink) -> str:
    """One-line description used in build logs and warnings."""
    location = link.source_file or link.source_page
    if link.line_number:
        location = f"{location}:{link.line_number}"
    message = f"{location}: broken link {link.link_url}"
    if link.original_syntax:
        message += f" ({link.original_syntax})"
    if link.suggestions:
        message += f"; did you mean {', '.join(link.suggestions)}?"
    return message
