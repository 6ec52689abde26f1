"""
Link record shared by storage backends and the service layer.

`Link` is a frozen dataclass: a returned record is a snapshot, and the only way visit_count
changes is the store replacing its own copy inside increment_visit_count().
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Link:
    short_code: str
    long_url: str
    visit_count: int = 0
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.short_code:
            raise ValueError("short_code must be non-empty")
        if self.visit_count < 0:
            raise ValueError("visit_count must be >= 0")

    def with_visit(self) -> "Link":
        """Return a copy with visit_count + 1."""
        return replace(self, visit_count=self.visit_count + 1)

    def to_dict(self) -> dict:
        return {
            "short_code": self.short_code,
            "long_url": self.long_url,
            "visit_count": self.visit_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
