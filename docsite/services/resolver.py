"""Reverse mapping from site URLs back to source files.

Used by the preview server, which cannot precompute a URL map because the
tree may change between requests, and by the scanner to decide which of two
colliding pages owns a URL.  Every lookup reads the directories it needs.
"""

import logging
import os
from typing import List, Optional, Tuple
from urllib.parse import unquote, urlsplit

from docsite.services.metadata import (
    MARKUP_EXTENSIONS,
    extract_metadata,
    is_hidden,
    is_index_name,
    is_markup_file,
    slugify,
)

logger = logging.getLogger(__name__)


def entry_order_key(name: str) -> Tuple[str, str]:
    """Deterministic directory-listing order shared with the scanner."""
    return name.lower(), name


def list_entries(directory: str) -> List[os.DirEntry]:
    """Return the visible entries of *directory* in :func:`entry_order_key` order.

    Raises:
        OSError: if the directory cannot be listed.
    """
    with os.scandir(directory) as it:
        entries = [entry for entry in it if not is_hidden(entry.name)]
    entries.sort(key=lambda entry: entry_order_key(entry.name))
    return entries


def pick_directory(entries: List[os.DirEntry], segment: str) -> Optional[os.DirEntry]:
    """Choose the subdirectory addressed by the URL *segment*.

    A directory whose name already equals the segment wins, otherwise the
    first one (in listing order) whose slug matches.
    """
    matches = [e for e in entries if e.is_dir() and slugify(e.name) == segment]
    for entry in matches:
        if entry.name == segment:
            return entry
    return matches[0] if matches else None


def url_segments(url: str) -> Optional[List[str]]:
    """Split a request URL into path segments, or None if it is not addressable."""
    path = unquote(urlsplit(url).path)
    segments = [s for s in path.strip("/").split("/") if s]
    if any(s in (".", "..") or is_hidden(s) or "\\" in s for s in segments):
        return None
    return segments


def find_directory(root_dir: str, segments: List[str]) -> Optional[str]:
    """Walk slugified *segments* down from *root_dir* to a real directory.

    ``["inbox", "health"]`` -> ``<root>/0. Inbox/1. Health``.
    """
    current = root_dir
    for segment in segments:
        try:
            entries = list_entries(current)
        except OSError as exc:
            logger.debug("Resolver: cannot list %s: %s", current, exc)
            return None
        entry = pick_directory(entries, segment)
        if entry is None:
            return None
        current = entry.path
    return current


def find_index_file(directory: str) -> Optional[str]:
    """First markup file in *directory* named index or readme."""
    try:
        entries = list_entries(directory)
    except OSError:
        return None
    for entry in entries:
        if is_markup_file(entry.name) and is_index_name(entry.name) and entry.is_file():
            return entry.path
    return None


def find_prefixed_file(directory: str, slug: str) -> Optional[str]:
    """First markup file in *directory* whose extracted slug is *slug*.

    Recovers date- and number-prefixed files: ``posts/hello-world`` ->
    ``posts/2024-01-15-hello-world.md``.  Index and readme files are only
    reachable through their folder and never match.
    """
    try:
        entries = list_entries(directory)
    except OSError:
        return None
    for entry in entries:
        if not is_markup_file(entry.name) or is_index_name(entry.name) or not entry.is_file():
            continue
        if extract_metadata(entry.name).slug == slug:
            return entry.path
    return None


def _find_literal_file(root_dir: str, segments: List[str]) -> Optional[str]:
    if not segments or is_index_name(segments[-1]):
        return None
    directory = os.path.join(root_dir, *segments[:-1])
    try:
        names = {entry.name for entry in list_entries(directory)}
    except OSError:
        return None
    for ext in MARKUP_EXTENSIONS:
        name = segments[-1] + ext
        candidate = os.path.join(directory, name)
        # Exact name match so case-insensitive filesystems report the real file.
        if name in names and os.path.isfile(candidate):
            return candidate
    return None


def resolve_url(root_dir: str, url: str) -> Optional[str]:
    """Map a site URL to the absolute path of the markup file that serves it.

    Tries, in order:

    1. ``<url>.md`` (or ``.markdown``) taken literally;
    2. the directory addressed by the URL, then its index/readme file;
    3. the file in the parent directory whose extracted slug matches the
       last URL segment.

    Returns None when nothing matches.  Misses are normal results, not
    errors.
    """
    segments = url_segments(url)
    if segments is None:
        return None
    root = os.path.abspath(root_dir)

    found = _find_literal_file(root, segments)
    if found:
        return found

    directory = find_directory(root, segments)
    if directory is not None:
        found = find_index_file(directory)
        if found:
            return found

    if segments:
        parent = find_directory(root, segments[:-1])
        if parent is not None:
            found = find_prefixed_file(parent, segments[-1])
            if found:
                return found

    logger.debug("Resolver: no source file for %s", url)
    return None
