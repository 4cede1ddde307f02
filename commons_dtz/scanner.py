"""
scanner.py
==========
Walks a user's uploads between two files, oldest first, and sets the date of
each one from its Exif DateTimeOriginal.

``RangeScanner.run`` is a generator: one line is produced per processed file
(or skipped query batch) as soon as it is known, followed by one final status
line. Closing the generator stops the scan.
"""

import logging
import time
from typing import Iterator, Optional, Tuple
from urllib.parse import unquote

from .config import COMMONS_WIKI
from .editor import ConflictAwareEditor
from .errors import (ConfigError, EditError, FetchError, ParseError, QueryError,
                     SaveError)
from .models import CONVERTED, FAILED, SKIPPED, EditOutcome, ImageRecord, SkippedEntry
from .store import BATCH_SIZE
from .throttle import RateState
from .zones import EXIF_FORMAT, ZoneSpec, convert, parse_capture_time

log = logging.getLogger(__name__)

FILE_PREFIX = "File:"
BAD_TITLE_CHARS = "/|"
PACE = 1.0  # seconds before each record, keeps read traffic modest


# ─── input helpers ────────────────────────────────────────────────

def file_title(param: str) -> str:
    """Normalise a file name or Commons URL to a ``File:`` title; "" stays ""."""
    param = param.strip()
    if param.startswith(COMMONS_WIKI):
        param = unquote(param[len(COMMONS_WIKI):]).replace("_", " ")
    if any(c in param for c in BAD_TITLE_CHARS):
        raise ConfigError("Filenames may not contain the characters " + BAD_TITLE_CHARS)
    if not param:
        return param
    if not param.startswith(FILE_PREFIX):
        param = FILE_PREFIX + param
    return param


def resolve_range(store, first: str, last: str) -> Tuple[ImageRecord, ImageRecord]:
    """Look up both boundary files and return them oldest first.

    Either name may be empty to process a single file. Files uploaded by two
    different users cannot form a range.
    """
    first = file_title(first)
    last = file_title(last)
    first = first or last
    last = last or first
    if not first:
        raise ConfigError("Please supply at least one file name.")
    info1, info2 = store.query_by_title([first, last])
    if info1.upload_time > info2.upload_time:
        info1, info2 = info2, info1
    if info1.user != info2.user:
        raise ConfigError("Two files must be uploaded by the same user.")
    return info1, info2


# ─── scanner ──────────────────────────────────────────────────────

class RangeScanner:
    def __init__(self, store, editor: ConflictAwareEditor, camera_zone: ZoneSpec,
                 local_zone: ZoneSpec, model_filter="", state: Optional[RateState] = None,
                 pace=PACE, sleep=time.sleep, max_edits=0, batch_size=BATCH_SIZE):
        self.store = store
        self.editor = editor
        self.camera_zone = camera_zone
        self.local_zone = local_zone
        self.model_filter = model_filter.lower()
        self.state = state if state is not None else RateState()
        self.pace = pace
        self.sleep = sleep
        self.max_edits = max_edits
        self.batch_size = batch_size
        self.counts = {CONVERTED: 0, SKIPPED: 0, FAILED: 0}

    def process(self, record: ImageRecord) -> EditOutcome:
        """Filter, convert and edit one record."""
        title = record.title
        if not record.original_time:
            return EditOutcome(title, SKIPPED, "time not found in metadata.")
        if self.model_filter:
            if not record.model or self.model_filter not in record.model.lower():
                return EditOutcome(title, SKIPPED, "camera model didn't match.")
        try:
            parsed = parse_capture_time(record.original_time, self.camera_zone)
        except ParseError as e:
            return EditOutcome(title, SKIPPED, f"failed to parse the timestamp: {e}")
        converted = convert(parsed, self.local_zone)
        try:
            self.editor.attempt_edit(title, converted, self.state)
        except (FetchError, SaveError) as e:
            return EditOutcome(title, FAILED, str(e))
        except EditError as e:
            return EditOutcome(title, SKIPPED, str(e))
        message = f"date-time {parsed.strftime(EXIF_FORMAT)} converted to {converted.strftime(EXIF_FORMAT)}"
        if self.editor.dry_run:
            message += " (dry run)"
        return EditOutcome(title, CONVERTED, message)

    def _report(self, outcome: EditOutcome) -> str:
        self.counts[outcome.status] += 1
        return outcome.line()

    def summary(self) -> str:
        c = self.counts
        return f"Done: {c[CONVERTED]} converted, {c[SKIPPED]} skipped, {c[FAILED]} failed."

    def run(self, user: str, start: str, end: str) -> Iterator[str]:
        """Process ``user``'s uploads with ``start <= upload time <= end``."""
        if start > end:
            start, end = end, start
        log.info("scanning uploads of %s from %s to %s", user, start, end)
        try:
            for batch in self.store.query_range(user, start, end, self.batch_size):
                if batch.error:
                    log.warning("%s", batch.error)
                    yield batch.error
                    continue
                if not len(batch):
                    break
                for entry in batch.entries:
                    self.sleep(self.pace)
                    if isinstance(entry, SkippedEntry):
                        yield self._report(EditOutcome(entry.title or None, SKIPPED, entry.reason))
                        continue
                    outcome = self.process(entry)
                    yield self._report(outcome)
                    if self.max_edits and self.counts[CONVERTED] >= self.max_edits:
                        yield f"Reached max edits ({self.max_edits}); stopping run."
                        yield self.summary()
                        return
        except QueryError as e:
            log.error("query failed: %s", e)
            yield f"Query returned an error: {e}"
            return
        except GeneratorExit:
            # Consumer went away, e.g. the output pipe was closed.
            log.info("scan stopped by consumer after %s", self.counts)
            raise
        yield self.summary()
