"""Content tree scanner.

Walks a content directory once and builds an immutable :class:`Site`:
the ordered folder/page tree plus the flattened page sequence used for
prev/next navigation and link validation.
"""

import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Set, Tuple

from docsite.models.metadata import PrefixKind
from docsite.models.node import Node, Site, SlugCollision
from docsite.services.metadata import (
    clean_label,
    extract_metadata,
    is_index_name,
    is_markup_file,
    slugify,
)
from docsite.services.resolver import list_entries, pick_directory, resolve_url
from docsite.services.slugs import folder_url, url_for

logger = logging.getLogger(__name__)

ROOT_PAGE_NAME = "Home"


@dataclass
class _FileDraft:
    name: str
    path: str
    source_path: str
    modified: datetime


@dataclass
class _FolderDraft:
    name: str
    path: str
    source_path: str
    folders: List["_FolderDraft"] = field(default_factory=list)
    files: List[_FileDraft] = field(default_factory=list)


def sibling_sort_key(node: Node) -> Tuple:
    """The single ordering policy for siblings, page lists and auto-indexes.

    Files come before folders.  Within each group: dated names newest
    first, then numbered names ascending, then unprefixed names, each
    broken by case-insensitive name and finally by path.
    """
    meta = node.metadata
    if meta.prefix is PrefixKind.DATE and meta.prefix_date is not None:
        group, key = 0, -meta.prefix_date.toordinal()
    elif meta.prefix is PrefixKind.NUMBER and meta.prefix_number is not None:
        group, key = 1, meta.prefix_number
    else:
        group, key = 2, 0
    return node.is_folder, group, key, node.name.casefold(), node.path


def _join(rel: str, name: str) -> str:
    return f"{rel}/{name}" if rel else name


def _walk(
    directory: str,
    rel: str,
    visited: Set[str],
    collisions: List[SlugCollision],
) -> _FolderDraft:
    visited.add(os.path.realpath(directory))
    draft = _FolderDraft(
        name=os.path.basename(directory) if rel else "",
        path=rel,
        source_path=directory,
    )

    # Raises OSError for unreadable directories; the whole scan fails.
    entries = list_entries(directory)

    subdirs: Dict[str, List[os.DirEntry]] = defaultdict(list)
    for entry in entries:
        if entry.is_dir():
            slug = slugify(entry.name)
            if not slug:
                logger.warning("Scanner: skipping folder with no addressable name: %s", _join(rel, entry.name))
                continue
            subdirs[slug].append(entry)
        elif entry.is_file() and is_markup_file(entry.name):
            child_rel = _join(rel, entry.name)
            if not extract_metadata(entry.name).slug:
                logger.warning("Scanner: skipping page with no addressable name: %s", child_rel)
                continue
            draft.files.append(
                _FileDraft(
                    name=entry.name,
                    path=child_rel,
                    source_path=entry.path,
                    modified=datetime.fromtimestamp(entry.stat().st_mtime, tz=timezone.utc),
                )
            )

    for entry in entries:
        if not entry.is_dir():
            continue
        group = subdirs.get(slugify(entry.name))
        if not group:
            continue
        winner = pick_directory(group, slugify(entry.name))
        if entry is not winner:
            collisions.append(
                SlugCollision(
                    url=folder_url(_join(rel, entry.name)),
                    winner=_join(rel, winner.name),
                    shadowed=_join(rel, entry.name),
                )
            )
            continue
        if os.path.realpath(entry.path) in visited:
            logger.warning("Scanner: skipping already visited directory %s", entry.path)
            continue
        draft.folders.append(_walk(entry.path, _join(rel, entry.name), visited, collisions))

    return draft


def _iter_drafts(draft: _FolderDraft) -> Iterator[_FolderDraft]:
    yield draft
    for folder in draft.folders:
        yield from _iter_drafts(folder)


def _drop_shadowed_pages(root_dir: str, root: _FolderDraft, collisions: List[SlugCollision]) -> None:
    """Keep one page per URL: the file the reverse resolver would serve."""
    by_url: Dict[str, List[Tuple[_FolderDraft, _FileDraft]]] = defaultdict(list)
    for folder in _iter_drafts(root):
        for page in folder.files:
            by_url[url_for(page.path)].append((folder, page))

    for url, members in by_url.items():
        if len(members) < 2:
            continue
        served = resolve_url(root_dir, url)
        winner = next((page for _, page in members if page.source_path == served), members[0][1])
        for folder, page in members:
            if page is winner:
                continue
            folder.files.remove(page)
            collisions.append(SlugCollision(url=url, winner=winner.path, shadowed=page.path))


def _file_node(page: _FileDraft, name: Optional[str] = None) -> Node:
    return Node(
        name=name or clean_label(page.name),
        path=page.path,
        source_path=page.source_path,
        metadata=extract_metadata(page.name, page.modified),
    )


def _freeze(draft: _FolderDraft, index_pages: Dict[str, Node]) -> Optional[Node]:
    """Turn a draft folder into an immutable Node, or None if it holds no pages."""
    is_root = draft.path == ""
    folders = [node for node in (_freeze(f, index_pages) for f in draft.folders) if node is not None]

    # Files are already in listing order, so the first index name wins.
    index_file = next((f for f in draft.files if is_index_name(f.name)), None)
    pages = [_file_node(f) for f in draft.files if f is not index_file]

    if not is_root and index_file is None and not pages and not folders:
        return None

    name = ROOT_PAGE_NAME if is_root else clean_label(draft.name)
    if index_file is not None:
        index_pages[draft.path] = _file_node(index_file, name=name)

    return Node(
        name=name,
        path=draft.path,
        source_path=draft.source_path,
        is_folder=True,
        children=tuple(sorted(pages + folders, key=sibling_sort_key)),
        has_index=index_file is not None,
        index_path=index_file.path if index_file is not None else None,
        metadata=extract_metadata(draft.name),
    )


def _flatten(node: Node, index_pages: Dict[str, Node], out: List[Node]) -> None:
    if node.has_index:
        out.append(index_pages[node.path])
    for child in node.children:
        if child.is_folder:
            _flatten(child, index_pages, out)
        else:
            out.append(child)


def iter_folders(node: Node) -> Iterator[Node]:
    """Pre-order walk over *node* and every folder below it."""
    if node.is_folder:
        yield node
        for child in node.children:
            yield from iter_folders(child)


def _auto_index_collisions(root: Node, all_pages: List[Node]) -> List[SlugCollision]:
    page_by_url = {url_for(page.path): page.path for page in all_pages}
    collisions = []
    for folder in iter_folders(root):
        if folder.path and not folder.has_index:
            url = folder_url(folder.path)
            if url in page_by_url:
                collisions.append(SlugCollision(url=url, winner=page_by_url[url], shadowed=folder.path))
    return collisions


def scan(root_dir: str) -> Site:
    """Scan *root_dir* and build the content tree.

    Hidden entries are skipped, markup files become pages, folders with no
    pages at any depth are pruned.  Entries that collide on a URL keep one
    deterministic winner; the rest are reported in ``Site.collisions`` and
    logged.

    Raises:
        OSError: if the root or any subdirectory cannot be read.  No partial
            site is returned.
    """
    root_path = os.path.abspath(root_dir)
    collisions: List[SlugCollision] = []

    draft = _walk(root_path, "", set(), collisions)
    _drop_shadowed_pages(root_path, draft, collisions)

    index_pages: Dict[str, Node] = {}
    root = _freeze(draft, index_pages)
    all_pages: List[Node] = []
    _flatten(root, index_pages, all_pages)
    collisions.extend(_auto_index_collisions(root, all_pages))

    for collision in collisions:
        logger.warning(
            "Scanner: %s and %s both map to %s; keeping %s",
            collision.winner,
            collision.shadowed,
            collision.url,
            collision.winner,
        )

    logger.debug("Scanner: %d pages under %s", len(all_pages), root_path)
    return Site(root=root, all_pages=tuple(all_pages), collisions=tuple(collisions))
