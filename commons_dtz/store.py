"""
store.py
========
Commons access through mwclient: page text with its revision timestamp, file
info lookups, the upload-range query and guarded saves.

API responses are requested with ``formatversion=2`` and turned into the
types in ``models`` here, once; nothing past this module looks at raw JSON.
Transport and API failures are translated into the package's exceptions.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import mwclient
import requests
from mwclient.errors import APIError, MaximumRetriesExceeded, MwClientError

from .errors import FetchError, QueryError, SaveAttemptFailed
from .models import Document, ImageRecord, QueryBatch, SkippedEntry

log = logging.getLogger(__name__)

BATCH_SIZE = 100

_UPSTREAM_ERRORS = (MwClientError, requests.RequestException)


def error_text(e: Exception) -> str:
    """Message of an upstream error; MaximumRetriesExceeded carries a (message, details) pair."""
    if isinstance(e, MaximumRetriesExceeded) and e.args:
        return str(e.args[0])
    return str(e)


# ─── response parsing ─────────────────────────────────────────────

def metadata_value(metadata: Sequence[Dict[str, Any]], name: str) -> Optional[str]:
    """Return the string value of a commonmetadata entry, or None."""
    for entry in metadata:
        if not isinstance(entry, dict) or entry.get("name") != name:
            continue
        value = entry.get("value")
        return value if isinstance(value, str) and value else None
    return None


def parse_image_page(page: Dict[str, Any], require_metadata: bool = False) -> ImageRecord:
    """Build a record from one ``prop=imageinfo`` page entry."""
    if not isinstance(page, dict):
        raise QueryError("Skipped an item with missing pages object.")
    title = page.get("title")
    if not isinstance(title, str) or not title:
        raise QueryError("Skipped an item with no title.")
    if page.get("missing") or page.get("invalid"):
        raise QueryError("File not found.", title=title)
    infos = page.get("imageinfo")
    if not isinstance(infos, list) or not infos or not isinstance(infos[0], dict):
        raise QueryError("missing imageinfo array.", title=title)
    info = infos[0]
    metadata = info.get("commonmetadata")
    if not isinstance(metadata, list):
        if require_metadata:
            raise QueryError("no commonmetadata.", title=title)
        # commonmetadata is null for some files
        metadata = []
    return ImageRecord(
        title=title,
        upload_time=info.get("timestamp") or "",
        user=info.get("user") or "",
        original_time=metadata_value(metadata, "DateTimeOriginal"),
        model=metadata_value(metadata, "Model"),
    )


def parse_batch(data: Any) -> QueryBatch:
    """Turn one page of the allimages generator query into a ``QueryBatch``."""
    if not isinstance(data, dict):
        return QueryBatch(error="Skipped a batch with a malformed response.")
    if "query" not in data:
        # MediaWiki leaves out "query" when nothing matched.
        return QueryBatch()
    pages = data["query"].get("pages") if isinstance(data["query"], dict) else None
    if not isinstance(pages, list):
        return QueryBatch(error="Skipped a batch with missing pages array.")

    entries: List[Union[ImageRecord, SkippedEntry]] = []
    for page in pages:
        try:
            entries.append(parse_image_page(page, require_metadata=True))
        except QueryError as e:
            entries.append(SkippedEntry(e.title or "", str(e), _upload_time(page)))
    entries.sort(key=lambda e: (e.upload_time, e.title))
    return QueryBatch(entries=entries)


def _upload_time(page: Any) -> str:
    try:
        return page["imageinfo"][0]["timestamp"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def _first_page(data: Dict[str, Any]) -> Dict[str, Any]:
    pages = data.get("query", {}).get("pages") or []
    if not pages:
        raise FetchError("empty pages array.")
    return pages[0]


# ─── store ────────────────────────────────────────────────────────

class CommonsStore:
    """Document store backed by an (authenticated) ``mwclient.Site``."""

    def __init__(self, site: mwclient.Site):
        self.site = site

    def fetch(self, title: str) -> Document:
        try:
            data = self.site.get(
                "query", prop="revisions", titles=title, rvprop="content|timestamp",
                rvslots="main", formatversion=2,
            )
        except _UPSTREAM_ERRORS as e:
            raise FetchError(f"failed to fetch page: {error_text(e)}") from e
        page = _first_page(data)
        if page.get("missing"):
            raise FetchError("page not found.")
        try:
            rev = page["revisions"][0]
            text = rev["slots"]["main"]["content"]
            timestamp = rev["timestamp"]
        except (KeyError, IndexError, TypeError) as e:
            raise FetchError(f"malformed revision data: {e}") from e
        return Document(title=page.get("title", title), text=text, base_timestamp=timestamp)

    def query_by_title(self, titles: Sequence[str]) -> List[ImageRecord]:
        """File info for ``titles``, in the order asked for.

        Asking for the same title twice yields the same record twice.
        """
        try:
            data = self.site.get(
                "query", titles="|".join(titles), prop="imageinfo",
                iiprop="timestamp|user|commonmetadata", formatversion=2,
            )
        except _UPSTREAM_ERRORS as e:
            raise QueryError(f"imageinfo query failed: {error_text(e)}") from e
        query = data.get("query") or {}
        pages = query.get("pages")
        if not pages:
            raise QueryError("Empty pages array when requesting imageinfo.")
        by_title = {}
        for page in pages:
            record = parse_image_page(page)
            by_title[record.title] = record
        renamed = {n["from"]: n["to"] for n in query.get("normalized", [])}
        result = []
        for title in titles:
            key = renamed.get(title, title)
            if key not in by_title:
                raise QueryError("File not found.", title=title)
            result.append(by_title[key])
        return result

    def query_range(self, user: str, start: str, end: str, page_size: int = BATCH_SIZE) -> Iterator[QueryBatch]:
        """Yield ``user``'s uploads between ``start`` and ``end`` (inclusive), oldest first.

        Raises ``QueryError`` when the API or the connection fails.
        """
        params = {
            "generator": "allimages",
            "gaiuser": user,
            "gaisort": "timestamp",
            "gaidir": "ascending",
            "gailimit": page_size,
            "gaistart": start,
            "gaiend": end,
            "prop": "imageinfo",
            "iiprop": "timestamp|commonmetadata",
            "formatversion": 2,
        }
        while True:
            try:
                data = self.site.get("query", **params)
            except _UPSTREAM_ERRORS as e:
                raise QueryError(error_text(e)) from e
            yield parse_batch(data)
            if not isinstance(data, dict) or "continue" not in data:
                break
            params.update(data["continue"])

    def save(self, title: str, text: str, base_timestamp: str, summary: str) -> None:
        """Save ``text``; raises ``SaveAttemptFailed`` when the edit is rejected."""
        try:
            token = self.site.get_token("csrf")
            result = self.site.post(
                "edit", title=title, text=text, summary=summary,
                basetimestamp=base_timestamp, nocreate=1, token=token,
                **{"assert": "user"},
            )
        except APIError as e:
            raise SaveAttemptFailed(f"{e.code}: {e.info}", code=e.code) from e
        except _UPSTREAM_ERRORS as e:
            raise SaveAttemptFailed(error_text(e)) from e
        edit = result.get("edit", {}) if isinstance(result, dict) else {}
        if edit.get("result") != "Success":
            raise SaveAttemptFailed(f"edit result: {edit or result}")
        log.info("saved %s", title)
