from typing import List, Optional

from pydantic import BaseModel

from docsite.models.broken_link import BrokenLink
from docsite.models.node import SlugCollision


class TreeEntry(BaseModel):
    name: str
    path: str
    url: str
    is_folder: bool
    index_path: Optional[str] = None
    children: List["TreeEntry"] = []


class SiteResponse(BaseModel):
    source_dir: str
    tree: TreeEntry
    pages: List[str]
    """Canonical URLs of every page, in navigation order."""
    auto_index_urls: List[str]
    collisions: List[SlugCollision]


class PageLinksResponse(BaseModel):
    url: str
    source_file: str
    broken_links: List[BrokenLink]
