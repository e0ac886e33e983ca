"""Live preview: every request scans the content tree fresh.

Requests share nothing, so concurrent requests need no locking.  The route
is a plain ``def`` endpoint, so FastAPI runs it in its threadpool and the
blocking disk reads of one request do not stall the others.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, HTMLResponse, Response

from docsite.models.node import Node, Site
from docsite.models.settings import SiteSettings
from docsite.services.autoindex import build_auto_index, folders_needing_auto_index, render_auto_index
from docsite.services.link_validator import build_valid_urls, validate_page_links
from docsite.services.metadata import is_hidden, is_markup_file
from docsite.services.navigation import (
    build_breadcrumbs,
    build_page_navigation,
    find_folder,
    find_page,
)
from docsite.services.renderer import extract_h1, read_source, render_markdown, render_page
from docsite.services.resolver import resolve_url, url_segments
from docsite.services.scanner import scan
from docsite.services.settings import get_settings
from docsite.services.slugs import directory_url, url_for

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Preview"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/{url_path:path}", include_in_schema=False)
def preview(
    url_path: str,
    settings: SiteSettings = Depends(get_settings),
) -> Response:
    """Serve a static file, a rendered page, a folder listing or a 404."""
    url = "/" + url_path
    root = os.path.abspath(settings.source_dir)

    static_path = _static_file(root, url)
    if static_path is not None:
        return FileResponse(static_path, headers=NO_CACHE_HEADERS)

    try:
        site = scan(root)
    except OSError as exc:
        logger.error("Preview: failed to scan %s: %s", root, exc)
        return _html(_error_page(settings, "Scan Error", f"Cannot read {root}."), status_code=500)

    source_path = resolve_url(root, url)
    if source_path is not None:
        page = find_page(site, source_path)
        if page is not None:
            logger.debug("Preview: %s -> %s", url, page.path)
            return _html(_render_site_page(site, page, settings))

    folder = find_folder(site.root, url if url.endswith("/") else url + "/")
    if folder is not None and folder in folders_needing_auto_index(site):
        index = build_auto_index(folder)
        return _html(
            render_page(
                title=index.title or settings.title,
                content=render_auto_index(index),
                site_title=settings.title,
            )
        )

    logger.info("Preview: no page for %s", url)
    return _html(
        _error_page(
            settings,
            "Page Not Found",
            "The page you're looking for doesn't exist.",
        ),
        status_code=404,
    )


def _html(content: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content, status_code=status_code, headers=NO_CACHE_HEADERS)


def _static_file(root: str, url: str) -> Optional[str]:
    """Absolute path of a non-markup file inside *root* addressed by *url*."""
    segments = url_segments(url)
    if not segments:
        return None
    candidate = os.path.realpath(os.path.join(root, *segments))
    if os.path.commonpath([candidate, os.path.realpath(root)]) != os.path.realpath(root):
        return None
    if not os.path.isfile(candidate) or is_markup_file(candidate) or is_hidden(segments[-1]):
        return None
    return candidate


def _render_site_page(site: Site, page: Node, settings: SiteSettings) -> str:
    text = read_source(page.source_path)
    page_url = url_for(page.path)
    source_dir = directory_url(page.path)
    content = render_markdown(text, source_dir)

    broken_links = validate_page_links(
        content,
        page_url,
        build_valid_urls(site),
        source_file=page.path,
        markdown=text,
        source_dir=source_dir,
    )
    if broken_links:
        logger.warning("Preview: page %s has %d broken internal link(s)", page_url, len(broken_links))
        for link in broken_links:
            logger.warning("  -> %s", link.link_url)

    return render_page(
        title=extract_h1(text) or page.name,
        content=content,
        site_title=settings.title,
        breadcrumbs=build_breadcrumbs(site, page, settings.title) if settings.breadcrumbs else None,
        page_nav=build_page_navigation(site, page) if settings.page_nav else None,
        broken_links=broken_links,
    )


def _error_page(settings: SiteSettings, title: str, message: str) -> str:
    content = f'<h1>{title}</h1>\n<p>{message}</p>\n<p><a href="/">Return to home</a></p>'
    return render_page(title=title, content=content, site_title=settings.title)
