from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class PrefixKind(str, Enum):
    """Which ordering prefix, if any, a file or folder name carries."""

    DATE = "date"
    NUMBER = "number"
    PLAIN = "plain"


class FileMetadata(BaseModel):
    """Ordering and addressing data parsed from a single file or folder name."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    prefix: PrefixKind = PrefixKind.PLAIN
    prefix_date: Optional[date] = None
    prefix_number: Optional[int] = None
    slug: str
    display_name: str
    is_draft: bool = False
    modified: Optional[datetime] = None  # carried through, never used for ordering

    @property
    def order_key(self) -> Optional[Union[date, int]]:
        if self.prefix is PrefixKind.DATE:
            return self.prefix_date
        if self.prefix is PrefixKind.NUMBER:
            return self.prefix_number
        return None
