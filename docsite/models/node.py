from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from docsite.models.metadata import FileMetadata


class Node(BaseModel):
    """One file or folder in the content tree.

    Nodes carry no parent reference; ancestor chains are computed top-down
    from the root (see :func:`docsite.services.navigation.find_ancestors`).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str  # slash-separated, relative to the content root, "" for the root
    source_path: str  # absolute filesystem path
    is_folder: bool = False
    children: Tuple["Node", ...] = ()
    has_index: bool = False
    index_path: Optional[str] = None
    metadata: FileMetadata


class SlugCollision(BaseModel):
    """Two entries that map to the same URL; only ``winner`` is kept in the tree."""

    model_config = ConfigDict(frozen=True)

    url: str
    winner: str
    shadowed: str


class Site(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: Node
    all_pages: Tuple[Node, ...] = ()
    collisions: Tuple[SlugCollision, ...] = ()
