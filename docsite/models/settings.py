from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SiteSettings(BaseModel):
    """Settings shared by the batch builder and the preview server.

    Field aliases match the keys accepted in ``docsite.json``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source_dir: str = "."
    output_dir: Optional[str] = Field(default=None, alias="output")
    title: str = Field(default="Docs", min_length=1, max_length=200)
    allow_broken_links: bool = Field(
        default=False,
        alias="allowBrokenLinks",
        description="Report broken internal links as warnings instead of failing the build.",
    )
    breadcrumbs: bool = True
    page_nav: bool = Field(default=True, alias="pageNav")
