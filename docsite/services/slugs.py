"""Forward mapping from content paths to canonical site URLs."""

import posixpath
from typing import List

from docsite.services.metadata import is_index_name, slugify, strip_markup_extension


def _segments(path: str) -> List[str]:
    return [s for s in path.replace("\\", "/").strip("/").split("/") if s not in ("", ".")]


def slugify_path(path: str) -> str:
    """Slugify every segment of *path*: ``"0. Inbox/1. Health"`` -> ``"inbox/health"``."""
    slugs = (slugify(segment) for segment in _segments(path))
    return "/".join(slug for slug in slugs if slug)


def url_for(path: str) -> str:
    """Return the canonical URL of the page at *path*.

    ``index.md`` -> ``/``, ``guides/01-intro.md`` -> ``/guides/intro/``,
    ``guides/README.md`` -> ``/guides/``.  Already-canonical URLs map to
    themselves: a trailing ``/`` marks a folder address, so ``/readme/``
    keeps its last segment.
    """
    segments = _segments(path)
    if segments and not path.replace("\\", "/").endswith("/"):
        last = strip_markup_extension(segments[-1])
        if is_index_name(last):
            segments.pop()
        else:
            segments[-1] = last
    slug_path = slugify_path("/".join(segments))
    return f"/{slug_path}/" if slug_path else "/"


def folder_url(path: str) -> str:
    """Return the URL of a folder.

    Unlike :func:`url_for` the last segment is never treated as an index
    page, so a folder literally named ``readme`` keeps its own address.
    """
    slug_path = slugify_path(path)
    return f"/{slug_path}/" if slug_path else "/"


def directory_url(path: str) -> str:
    """URL of the folder that contains the page at *path*."""
    return folder_url(posixpath.dirname(path.replace("\\", "/").strip("/")))


def output_path_for(path: str) -> str:
    """Relative output file for a page, using clean URLs.

    ``guides/intro.md`` -> ``guides/intro/index.html``, ``index.md`` ->
    ``index.html``.
    """
    return output_path_for_url(url_for(path))


def output_path_for_url(url: str) -> str:
    slug_path = url.strip("/")
    return f"{slug_path}/index.html" if slug_path else "index.html"
