from typing import List, Optional

from pydantic import BaseModel

from docsite.models.broken_link import BrokenLink


class BuildResult(BaseModel):
    source_dir: str
    output_dir: Optional[str] = None
    pages_built: int = 0
    auto_indexes_built: int = 0
    broken_links: List[BrokenLink] = []
    warnings: List[str] = []
    written: bool = False
    """True when output files were written to ``output_dir``."""
