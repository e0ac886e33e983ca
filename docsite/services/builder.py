"""Batch site build: scan once, render everything, validate, then publish.

Nothing is written until every page has rendered and the link check has
passed (or the build runs in lenient mode), so a failed build never leaves
a half-updated output directory behind.
"""

import logging
import os
from typing import Dict, List, Optional

from docsite.models.broken_link import BrokenLink
from docsite.models.build_result import BuildResult
from docsite.services.autoindex import build_auto_index, folders_needing_auto_index, render_auto_index
from docsite.services.link_validator import (
    RenderedPage,
    build_valid_urls,
    format_broken_link,
    validate_site,
)
from docsite.services.navigation import build_breadcrumbs, build_page_navigation
from docsite.services.renderer import extract_h1, read_source, render_markdown, render_page
from docsite.services.scanner import scan
from docsite.services.slugs import directory_url, output_path_for, url_for

logger = logging.getLogger(__name__)


class BuildFailedError(RuntimeError):
    """Raised by a strict build that found broken internal links."""

    def __init__(self, broken_links: List[BrokenLink]):
        super().__init__(f"build failed: {len(broken_links)} broken internal link(s) found")
        self.broken_links = broken_links


def _report_broken_links(broken_links: List[BrokenLink], lenient: bool) -> List[str]:
    log = logger.warning if lenient else logger.error
    log("Found %d broken internal link(s)", len(broken_links))
    messages = []
    for link in broken_links:
        message = format_broken_link(link)
        log("  %s", message)
        messages.append(message)
    return messages


def _write_outputs(output_dir: str, outputs: Dict[str, str]) -> None:
    for relative, html in outputs.items():
        target = os.path.join(output_dir, *relative.split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "w", encoding="utf-8") as handle:
            handle.write(html)


def build_site(
    source_dir: str,
    output_dir: Optional[str] = None,
    *,
    allow_broken_links: bool = False,
    site_title: str = "Docs",
    breadcrumbs: bool = True,
    page_nav: bool = True,
) -> BuildResult:
    """Build the site under *source_dir*.

    Args:
        source_dir:         Content root.
        output_dir:         Where to write ``index.html`` files; None renders
                            and validates without writing anything.
        allow_broken_links: Downgrade broken internal links to warnings.

    Returns:
        A :class:`BuildResult`; in lenient mode it lists the broken links
        and the matching warnings.

    Raises:
        OSError: if the content tree cannot be scanned or read.
        BuildFailedError: in strict mode, when any internal link is broken.
    """
    logger.info("Scanning %s", source_dir)
    site = scan(source_dir)
    warnings = [
        f"{c.shadowed} is shadowed by {c.winner} at {c.url}" for c in site.collisions
    ]

    if not site.all_pages:
        logger.warning("No markdown files found in %s", source_dir)
        return BuildResult(
            source_dir=source_dir,
            output_dir=output_dir,
            warnings=warnings + ["No markdown files found"],
        )

    outputs: Dict[str, str] = {}
    rendered: List[RenderedPage] = []

    for page in site.all_pages:
        text = read_source(page.source_path)
        source_dir_url = directory_url(page.path)
        content = render_markdown(text, source_dir_url)
        rendered.append(
            RenderedPage(
                url=url_for(page.path),
                source_file=page.path,
                source_dir=source_dir_url,
                markdown=text,
                html=content,
            )
        )
        outputs[output_path_for(page.path)] = render_page(
            title=extract_h1(text) or page.name,
            content=content,
            site_title=site_title,
            breadcrumbs=build_breadcrumbs(site, page, site_title) if breadcrumbs else None,
            page_nav=build_page_navigation(site, page) if page_nav else None,
        )
        logger.debug("Rendered %s", page.path)

    auto_indexes = [build_auto_index(folder) for folder in folders_needing_auto_index(site)]
    for index in auto_indexes:
        outputs[index.output_path] = render_page(
            title=index.title or site_title,
            content=render_auto_index(index),
            site_title=site_title,
        )
        logger.debug("Auto-indexed %s", index.folder_path or "/")

    broken_links = validate_site(rendered, build_valid_urls(site))
    if broken_links:
        messages = _report_broken_links(broken_links, lenient=allow_broken_links)
        if not allow_broken_links:
            raise BuildFailedError(broken_links)
        warnings.extend(messages)

    if output_dir:
        _write_outputs(output_dir, outputs)
        logger.info("Generated %d pages in %s", len(rendered), output_dir)

    return BuildResult(
        source_dir=source_dir,
        output_dir=output_dir,
        pages_built=len(rendered),
        auto_indexes_built=len(auto_indexes),
        broken_links=broken_links,
        warnings=warnings,
        written=bool(output_dir),
    )
