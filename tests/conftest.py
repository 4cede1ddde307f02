from __future__ import annotations

from typing import Dict, Iterator, List, Optional

import pytest

from commons_dtz.errors import FetchError, QueryError, SaveAttemptFailed
from commons_dtz.models import Document, ImageRecord, QueryBatch

PAGE_TEXT = (
    "=={{int:filedesc}}==\n"
    "{{Information\n"
    "|description={{en|1=A shrine}}\n"
    "|date=2020-06-15\n"
    "|source={{own}}\n"
    "|author=[[User:Jane Doe|Jane Doe]]\n"
    "}}\n"
)


class FakeClock:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeStore:
    """In-memory stand-in for CommonsStore."""

    def __init__(self, texts: Optional[Dict[str, str]] = None, default_text: str = PAGE_TEXT,
                 save_failures: int = 0, batches: Optional[List[QueryBatch]] = None,
                 records: Optional[Dict[str, ImageRecord]] = None,
                 query_error_after: Optional[int] = None) -> None:
        self.texts = dict(texts or {})
        self.default_text = default_text
        self.save_failures = save_failures
        self.batches = batches or []
        self.records = records or {}
        self.query_error_after = query_error_after
        self.fetches: List[str] = []
        self.saves: List[tuple] = []
        self.range_calls: List[tuple] = []
        self.fetch_error: Optional[str] = None

    def fetch(self, title: str) -> Document:
        self.fetches.append(title)
        if self.fetch_error:
            raise FetchError(self.fetch_error)
        text = self.texts.get(title, self.default_text)
        return Document(title=title, text=text, base_timestamp=f"rev-{len(self.fetches)}")

    def save(self, title: str, text: str, base_timestamp: str, summary: str) -> None:
        self.saves.append((title, text, base_timestamp, summary))
        if self.save_failures:
            self.save_failures -= 1
            raise SaveAttemptFailed("editconflict: Edit conflict detected", code="editconflict")
        self.texts[title] = text

    def query_by_title(self, titles) -> List[ImageRecord]:
        try:
            return [self.records[t] for t in titles]
        except KeyError as e:
            raise QueryError("File not found.", title=e.args[0]) from e

    def query_range(self, user: str, start: str, end: str, page_size: int = 100) -> Iterator[QueryBatch]:
        self.range_calls.append((user, start, end, page_size))
        for i, batch in enumerate(self.batches):
            if self.query_error_after is not None and i >= self.query_error_after:
                raise QueryError("internal_api_error: boom")
            yield batch


def make_record(n: int, original_time: Optional[str] = "2020:06:15 10:00:00",
                model: Optional[str] = "Canon EOS 80D") -> ImageRecord:
    return ImageRecord(
        title=f"File:Shrine {n:03d}.jpg",
        upload_time=f"2021-01-01T00:{n // 60:02d}:{n % 60:02d}Z",
        user="Jane Doe",
        original_time=original_time,
        model=model,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
