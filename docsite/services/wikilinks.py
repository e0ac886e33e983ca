"""Wiki-style ``[[Target]]`` / ``[[Target|Label]]`` links.

Targets with a ``/`` are resolved from the site root, bare targets relative
to the directory of the page that contains them.  Anything that does not
parse as a wikilink is left untouched.
"""

import os
import re
from typing import Iterator, List, NamedTuple

from docsite.services.metadata import slugify, strip_markup_extension
from docsite.services.slugs import url_for

# Optional leading "!" marks an embed; embeds are rendered as plain links.
_WIKILINK_RE = re.compile(r"!?\[\[([^\]|\n]+)(?:\|([^\]\n]+))?\]\]")

_FENCE_RE = re.compile(r"^\s*(```|~~~)")

ATTACHMENT_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp", ".ico", ".heic",
        ".pdf",
        ".mp3", ".mp4", ".wav", ".ogg", ".webm", ".mov",
        ".zip", ".docx", ".xlsx", ".pptx",
    }
)


class WikiLink(NamedTuple):
    line_number: int  # 1-based
    syntax: str  # the original text, e.g. "[[Setup|Install guide]]"
    target: str
    label: str


def is_attachment(target: str) -> bool:
    return os.path.splitext(target)[1].lower() in ATTACHMENT_EXTENSIONS


def _default_label(target: str) -> str:
    name = target.split("#", 1)[0].rstrip("/").split("/")[-1].strip()
    return strip_markup_extension(name) or target.strip()


def resolve_wikilink(target: str, source_dir: str = "/") -> str:
    """Resolve a wikilink target to a site URL.

    Args:
        target:     The text between the brackets, without the label.
        source_dir: URL of the folder containing the current page, e.g.
                    ``"/guides/"``.

    ``[[Setup]]`` from ``/guides/`` -> ``/guides/setup/``;
    ``[[api/Overview#auth]]`` -> ``/api/overview/#auth``;
    ``[[guides/index]]`` -> ``/guides/``.
    """
    target, _, fragment = target.strip().partition("#")
    anchor = f"#{fragment.strip()}" if fragment.strip() else ""
    target = target.strip()
    if not target:
        return anchor or "/"

    explicit = "/" in target
    base = "" if explicit else source_dir.strip("/")

    if is_attachment(target):
        parts = [p.strip() for p in target.split("/") if p.strip()]
        stem, ext = os.path.splitext(parts[-1])
        filename = re.sub(r"\s+", "-", stem.strip().lower()) + ext.lower()
        folders = [slugify(p) for p in parts[:-1]]
        segments = [s for s in base.split("/") if s] + [s for s in folders if s] + [filename]
        return "/" + "/".join(segments) + anchor

    path = f"{base}/{target}" if base else target
    return url_for(path) + anchor


def iter_wikilinks(text: str) -> Iterator[WikiLink]:
    """Yield every wikilink outside fenced code blocks, with its line number."""
    in_fence = False
    for number, line in enumerate(text.splitlines(), start=1):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        for match in _WIKILINK_RE.finditer(line):
            target, label = match.group(1), match.group(2)
            yield WikiLink(
                line_number=number,
                syntax=match.group(0),
                target=target.strip(),
                label=label.strip() if label else _default_label(target),
            )


def convert_wikilinks(text: str, source_dir: str = "/") -> str:
    """Rewrite wikilinks in *text* as standard Markdown links.

    Fenced code blocks are copied verbatim.
    """
    def _replace(match: "re.Match[str]") -> str:
        target, label = match.group(1), match.group(2)
        label = label.strip() if label else _default_label(target)
        return f"[{label}]({resolve_wikilink(target, source_dir)})"

    lines: List[str] = []
    in_fence = False
    for line in text.splitlines(keepends=True):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            lines.append(line)
        elif in_fence:
            lines.append(line)
        else:
            lines.append(_WIKILINK_RE.sub(_replace, line))
    return "".join(lines)
