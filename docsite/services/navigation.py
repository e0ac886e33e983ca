"""Breadcrumbs and prev/next links.

Nodes have no parent pointers, so ancestor chains are found by searching
down from the root.
"""

from typing import List, NamedTuple, Optional

from docsite.models.node import Node, Site
from docsite.services.slugs import folder_url, url_for


class Breadcrumb(NamedTuple):
    label: str
    url: Optional[str]
    current: bool = False


class NavLink(NamedTuple):
    title: str
    url: str
    section: str = ""


class PageNavigation(NamedTuple):
    previous: Optional[NavLink] = None
    next: Optional[NavLink] = None


def find_ancestors(root: Node, path: str) -> List[Node]:
    """Folders from *root* down to the one containing *path*.

    The root is always first.  When *path* is itself a folder it is not
    included.
    """
    chain = [root]
    node = root
    while True:
        step = next(
            (
                child
                for child in node.children
                if child.is_folder and path != child.path and path.startswith(child.path + "/")
            ),
            None,
        )
        if step is None:
            return chain
        chain.append(step)
        node = step


def find_page(site: Site, source_path: str) -> Optional[Node]:
    return next((page for page in site.all_pages if page.source_path == source_path), None)


def find_folder(root: Node, url: str) -> Optional[Node]:
    """Folder whose URL is *url*, searching top-down."""
    if folder_url(root.path) == url:
        return root
    for child in root.children:
        if child.is_folder and url.startswith(folder_url(child.path)):
            found = find_folder(child, url)
            if found is not None:
                return found
    return None


def _page_folders(site: Site, page: Node) -> List[Node]:
    """Ancestor folders of *page*, without the folder the page is the index of."""
    chain = find_ancestors(site.root, page.path)
    if chain and chain[-1].index_path == page.path:
        chain = chain[:-1]
    return chain


def build_breadcrumbs(site: Site, page: Node, site_title: str) -> List[Breadcrumb]:
    if url_for(page.path) == "/":
        return [Breadcrumb(label=site_title, url=None, current=True)]

    crumbs = [Breadcrumb(label=site_title, url="/")]
    for folder in _page_folders(site, page)[1:]:
        crumbs.append(Breadcrumb(label=folder.name, url=folder_url(folder.path)))
    crumbs.append(Breadcrumb(label=page.name, url=None, current=True))
    return crumbs


def _nav_link(site: Site, page: Node) -> NavLink:
    folders = _page_folders(site, page)
    section = folders[-1].name if len(folders) > 1 else ""
    return NavLink(title=page.name, url=url_for(page.path), section=section)


def build_page_navigation(site: Site, page: Node) -> PageNavigation:
    """Previous and next pages of *page* in ``site.all_pages`` order."""
    paths = [p.source_path for p in site.all_pages]
    if page.source_path not in paths:
        return PageNavigation()
    position = paths.index(page.source_path)
    previous = site.all_pages[position - 1] if position > 0 else None
    following = site.all_pages[position + 1] if position + 1 < len(site.all_pages) else None
    return PageNavigation(
        previous=_nav_link(site, previous) if previous is not None else None,
        next=_nav_link(site, following) if following is not None else None,
    )
