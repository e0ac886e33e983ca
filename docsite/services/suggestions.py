"""'Did you mean' suggestions for broken internal links.

Candidates are ranked with :class:`difflib.SequenceMatcher`.  Each valid URL
gets the better of two scores: the whole slug path compared with the broken
one, and the last segment compared with the broken last segment (so a typo
in a deeply nested page still finds its sibling).  Only scores of at least
``MIN_SIMILARITY`` are kept; an empty list is a valid answer.
"""

from difflib import SequenceMatcher
from typing import Iterable, List, Tuple

MIN_SIMILARITY = 0.6
MAX_SUGGESTIONS = 3


def _slug_text(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0].strip("/").lower()


def similarity(a: str, b: str) -> float:
    """Similarity in ``[0, 1]`` between two URLs, compared as slug paths."""
    left, right = _slug_text(a), _slug_text(b)
    if not left or not right:
        return 0.0
    whole = SequenceMatcher(None, left, right).ratio()
    last = SequenceMatcher(None, left.rsplit("/", 1)[-1], right.rsplit("/", 1)[-1]).ratio()
    return max(whole, last)


def suggest_urls(
    link_url: str,
    valid_urls: Iterable[str],
    limit: int = MAX_SUGGESTIONS,
    threshold: float = MIN_SIMILARITY,
) -> List[str]:
    """Return up to *limit* valid URLs that look like *link_url*, best first."""
    scored: List[Tuple[float, str]] = []
    for url in valid_urls:
        score = similarity(link_url, url)
        if score >= threshold:
            scored.append((score, url))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [url for _, url in scored[:limit]]
