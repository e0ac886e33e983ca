from typing import List

from pydantic import BaseModel


class BrokenLink(BaseModel):
    """An internal link whose target is not a page of the site."""

    source_page: str  # canonical URL of the page containing the link
    source_file: str = ""
    line_number: int = 0  # 1-based, 0 when unknown
    link_url: str
    original_syntax: str = ""
    link_text: str = ""
    suggestions: List[str] = []
