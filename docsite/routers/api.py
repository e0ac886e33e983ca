import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from docsite.models.api_response import PageLinksResponse, SiteResponse, TreeEntry
from docsite.models.node import Node, Site
from docsite.models.settings import SiteSettings
from docsite.services.autoindex import folders_needing_auto_index
from docsite.services.link_validator import build_valid_urls, validate_page_links
from docsite.services.navigation import find_page
from docsite.services.renderer import read_source, render_markdown
from docsite.services.resolver import resolve_url
from docsite.services.scanner import scan
from docsite.services.settings import get_settings
from docsite.services.slugs import directory_url, folder_url, url_for

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/__docsite/api", tags=["Inspection"])


def _tree_entry(node: Node) -> TreeEntry:
    return TreeEntry(
        name=node.name,
        path=node.path,
        url=folder_url(node.path) if node.is_folder else url_for(node.path),
        is_folder=node.is_folder,
        index_path=node.index_path,
        children=[_tree_entry(child) for child in node.children],
    )


def _scan(source_dir: str) -> Site:
    try:
        return scan(source_dir)
    except OSError as exc:
        logger.error("Error scanning %s: %s", source_dir, exc)
        raise HTTPException(status_code=500, detail=f"Cannot scan content directory: {exc}")


@router.get(
    "/site",
    response_model=SiteResponse,
    summary="Scanned content tree and page inventory",
)
@limiter.limit("60/minute")
def site_inventory(request: Request, settings: SiteSettings = Depends(get_settings)) -> SiteResponse:
    root = os.path.abspath(settings.source_dir)
    site = _scan(root)
    return SiteResponse(
        source_dir=root,
        tree=_tree_entry(site.root),
        pages=[url_for(page.path) for page in site.all_pages],
        auto_index_urls=[folder_url(f.path) for f in folders_needing_auto_index(site)],
        collisions=list(site.collisions),
    )


@router.get(
    "/links",
    response_model=PageLinksResponse,
    summary="Broken internal links of one page",
)
@limiter.limit("60/minute")
def page_links(
    request: Request,
    url: str = Query(..., description="Site URL of the page, e.g. /guides/setup/"),
    settings: SiteSettings = Depends(get_settings),
) -> PageLinksResponse:
    root = os.path.abspath(settings.source_dir)
    site = _scan(root)

    source_path = resolve_url(root, url)
    page = find_page(site, source_path) if source_path else None
    if page is None:
        raise HTTPException(status_code=404, detail=f"No page at {url}.")

    text = read_source(page.source_path)
    source_dir = directory_url(page.path)
    broken_links = validate_page_links(
        render_markdown(text, source_dir),
        url_for(page.path),
        build_valid_urls(site),
        source_file=page.path,
        markdown=text,
        source_dir=source_dir,
    )
    return PageLinksResponse(url=url_for(page.path), source_file=page.path, broken_links=broken_links)
