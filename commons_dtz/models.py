"""
models.py
=========
Plain value types passed between the store, the editor and the scanner.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

CONVERTED = "converted"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class Document:
    """Current text of a page plus the revision timestamp used as basetimestamp."""
    title: str
    text: str
    base_timestamp: str


@dataclass(frozen=True)
class FieldSpan:
    start: int = -1
    end: int = -1

    @property
    def found(self) -> bool:
        return self.start != -1

    def slice(self, text: str) -> str:
        if not self.found:
            return ""
        return text[self.start:self.end]


@dataclass(frozen=True)
class FieldPositions:
    author: FieldSpan
    date: FieldSpan


@dataclass(frozen=True)
class ImageRecord:
    title: str
    upload_time: str
    user: str = ""
    original_time: Optional[str] = None  # Exif DateTimeOriginal, camera-local
    model: Optional[str] = None


@dataclass(frozen=True)
class SkippedEntry:
    """A query result entry that could not be turned into a record."""
    title: str
    reason: str
    upload_time: str = ""


@dataclass(frozen=True)
class QueryBatch:
    """One page of range-query results.

    ``entries`` holds records and skipped entries together, in upload order.
    ``error`` is set when the whole page was unusable.
    """
    entries: List[Union[ImageRecord, SkippedEntry]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def records(self) -> List[ImageRecord]:
        return [e for e in self.entries if isinstance(e, ImageRecord)]

    @property
    def skipped(self) -> List[SkippedEntry]:
        return [e for e in self.entries if isinstance(e, SkippedEntry)]

    def __len__(self):
        return len(self.entries)


@dataclass(frozen=True)
class EditOutcome:
    title: Optional[str]
    status: str
    message: str

    def line(self) -> str:
        if self.title:
            return f"{self.title} – {self.message}"
        return self.message
