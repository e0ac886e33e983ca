"""Filename metadata: ordering prefixes, slugs and display labels.

Everything in this module is pure string processing.  The same ``slugify``
is used for extracted slugs and for URL segments, so the two can never
disagree.
"""

import re
import unicodedata
from datetime import date, datetime
from typing import Optional, Tuple, Union

from docsite.models.metadata import FileMetadata, PrefixKind

MARKUP_EXTENSIONS = (".md", ".markdown")

_INDEX_NAMES = {"index", "readme"}

# 2024-01-15-title, 2024_01_15_title, "2024-01-15 title"
_DATE_PREFIX_RE = re.compile(r"^([0-9]{4})[-_]([0-9]{2})[-_]([0-9]{2})[-_\s]\s*(\S.*)$")

# 01-title, 01_title, "0. title", "01 title", "6 - title"
_NUMBER_PREFIX_RE = re.compile(r"^([0-9]+)(?:[-_.]|\s+[-_]?)\s*(\S.*)$")

_SEPARATOR_RUN_RE = re.compile(r"[\s_]+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")


def strip_markup_extension(filename: str) -> str:
    """Remove a recognized markup extension, leaving any other dots alone.

    ``"0. Inbox"`` and ``"v1.2"`` are returned unchanged.
    """
    lower = filename.lower()
    for ext in MARKUP_EXTENSIONS:
        if lower.endswith(ext):
            return filename[: -len(ext)]
    return filename


def is_markup_file(filename: str) -> bool:
    lower = filename.lower()
    return any(lower.endswith(ext) and len(lower) > len(ext) for ext in MARKUP_EXTENSIONS)


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def classify_prefix(name: str) -> Tuple[PrefixKind, Optional[Union[date, int]], str]:
    """Split one ordering prefix off *name*.

    Returns ``(kind, order_key, remainder)``.  A date-shaped prefix that is
    not a real calendar date falls through to the number rule.
    """
    match = _DATE_PREFIX_RE.match(name)
    if match:
        year, month, day, remainder = match.groups()
        try:
            return PrefixKind.DATE, date(int(year), int(month), int(day)), remainder
        except ValueError:
            pass

    match = _NUMBER_PREFIX_RE.match(name)
    if match:
        number, remainder = match.groups()
        return PrefixKind.NUMBER, int(number), remainder

    return PrefixKind.PLAIN, None, name


def strip_prefixes(name: str) -> str:
    """Remove every leading date/number prefix from *name*."""
    remainder = name.strip()
    while True:
        kind, _, stripped = classify_prefix(remainder)
        if kind is PrefixKind.PLAIN:
            return remainder
        remainder = stripped.strip()


def _to_ascii(text: str) -> str:
    text = unicodedata.normalize("NFKD", text)
    return text.encode("ascii", "ignore").decode("ascii")


def _normalize(text: str) -> str:
    slug = _SEPARATOR_RUN_RE.sub("-", text.lower())
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def slugify(text: str) -> str:
    """Convert a single name into a URL-safe slug.

    >>> slugify("0. Inbox")
    'inbox'
    >>> slugify("2024-01-15-Hello World")
    'hello-world'

    The result is a fixed point: ``slugify(slugify(x)) == slugify(x)``.
    Characters that disappear during normalisation can expose a new prefix
    (``"(01) intro"``), so stripping repeats until nothing changes.
    """
    slug = _normalize(strip_prefixes(_to_ascii(text)))
    while True:
        again = _normalize(strip_prefixes(slug))
        if again == slug:
            return slug
        slug = again


def is_index_name(filename: str) -> bool:
    """True for ``index``/``readme`` pages, ignoring case, extension and prefixes."""
    return slugify(strip_markup_extension(filename)) in _INDEX_NAMES


def clean_label(filename: str) -> str:
    """Derive a display label from a file or folder name.

    ``getting-started.md`` -> ``Getting Started``, ``01-introduction.md`` ->
    ``Introduction``, ``FAQ.md`` -> ``FAQ``.
    """
    stem = strip_markup_extension(filename)
    name = strip_prefixes(stem).replace("-", " ").replace("_", " ")
    words = [w if _is_all_upper(w) else w[0].upper() + w[1:] for w in name.split()]
    return " ".join(words) or stem.strip()


def _is_all_upper(word: str) -> bool:
    letters = [c for c in word if c.isalpha()]
    return bool(letters) and all(c.isupper() for c in letters)


def extract_metadata(filename: str, modified: Optional[datetime] = None) -> FileMetadata:
    """Parse the ordering prefix, slug and label of *filename*.

    The first matching rule applies: a leading ISO date, then a leading
    number, otherwise no prefix.  A leading underscore marks a draft and is
    ignored for prefix matching.  Never raises.
    """
    stem = strip_markup_extension(filename).strip()
    is_draft = stem.startswith("_")
    if is_draft:
        stem = stem[1:]

    kind, key, remainder = classify_prefix(stem)

    return FileMetadata(
        original_name=filename,
        prefix=kind,
        prefix_date=key if kind is PrefixKind.DATE else None,
        prefix_number=key if kind is PrefixKind.NUMBER else None,
        slug=slugify(remainder),
        display_name=clean_label(remainder),
        is_draft=is_draft,
        modified=modified,
    )
