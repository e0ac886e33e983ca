"""Auto-generated listing pages for folders without an index document."""

from html import escape
from typing import List, NamedTuple

from docsite.models.node import Node, Site
from docsite.services.scanner import iter_folders
from docsite.services.slugs import folder_url, output_path_for_url, url_for


class AutoIndexItem(NamedTuple):
    title: str
    url: str
    is_folder: bool


class AutoIndex(NamedTuple):
    folder_path: str
    title: str
    url: str
    output_path: str
    items: List[AutoIndexItem]


def needs_auto_index(node: Node) -> bool:
    return node.is_folder and not node.has_index


def folders_needing_auto_index(site: Site) -> List[Node]:
    """Folders that get a generated listing, in tree order.

    The root is included when it has no index page.  A folder whose URL is
    already taken by a page gets no listing.
    """
    page_urls = {url_for(page.path) for page in site.all_pages}
    return [
        folder
        for folder in iter_folders(site.root)
        if needs_auto_index(folder) and folder_url(folder.path) not in page_urls
    ]


def build_auto_index(folder: Node) -> AutoIndex:
    """Describe the listing page for *folder*.

    Items keep the folder's child order, which is the same sibling order
    used everywhere else in the site.
    """
    items = [
        AutoIndexItem(
            title=child.name,
            url=folder_url(child.path) if child.is_folder else url_for(child.path),
            is_folder=child.is_folder,
        )
        for child in folder.children
    ]
    url = folder_url(folder.path)
    return AutoIndex(
        folder_path=folder.path,
        title=folder.name,
        url=url,
        output_path=output_path_for_url(url),
        items=items,
    )


def render_auto_index(index: AutoIndex) -> str:
    """HTML body for an auto-index page."""
    parts = ['<article class="auto-index-page">', f"<h1>{escape(index.title)}</h1>"]
    if index.items:
        parts.append('<ul class="folder-index">')
        for item in index.items:
            css_class = "folder-item" if item.is_folder else "page-item"
            parts.append(
                f'<li class="{css_class}"><a href="{escape(item.url)}">{escape(item.title)}</a></li>'
            )
        parts.append("</ul>")
    else:
        parts.append('<p class="empty-folder">This folder is empty.</p>')
    parts.append("</article>")
    return "\n".join(parts)
