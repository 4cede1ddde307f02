"""
editor.py
=========
Rewrites the ``date`` field of one file page with a {{DTZ}} value.

There's a small chance that saving a page fails because of an edit conflict
or another transient error, so a save is tried up to ``MAX_ATTEMPTS`` times.
Every attempt re-fetches the page and its revision timestamp; a stale
basetimestamp is never reused. Filter mismatches, missing fields and
no-op edits fail at once since retrying cannot change them.
"""

import logging
from datetime import datetime

from .config import EDIT_SUMMARY
from .errors import (FieldNotFound, FilterMismatch, NoChangeNeeded,
                     SaveAttemptFailed, SaveError)
from .throttle import RateLimiter, RateState
from .wikitext import find_positions, replace_span
from .zones import format_dtz

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class ConflictAwareEditor:
    def __init__(self, store, limiter: RateLimiter, author_filter="",
                 max_attempts=MAX_ATTEMPTS, summary=EDIT_SUMMARY, dry_run=False):
        self.store = store
        self.limiter = limiter
        self.author_filter = author_filter.lower()
        self.max_attempts = max_attempts
        self.summary = summary
        self.dry_run = dry_run

    def new_text(self, text: str, new_time: datetime) -> str:
        """Return ``text`` with its date field set to ``new_time``."""
        positions = find_positions(text)
        if self.author_filter:
            author = positions.author.slice(text).lower()
            if not positions.author.found or self.author_filter not in author:
                raise FilterMismatch("author didn't match.")
        if not positions.date.found:
            raise FieldNotFound("date field not found.")
        updated = replace_span(text, positions.date, format_dtz(new_time))
        if updated == text:
            raise NoChangeNeeded("no change needed.")
        return updated

    def attempt_edit(self, title: str, new_time: datetime, state: RateState) -> str:
        """Set the date of ``title``; returns the {{DTZ}} value written.

        Raises an ``EditError``. The rate clock in ``state`` only moves on a
        successful save.
        """
        last_error = None
        with state.lock:
            for attempt in range(1, self.max_attempts + 1):
                self.limiter.wait(state)
                document = self.store.fetch(title)
                text = self.new_text(document.text, new_time)
                if self.dry_run:
                    return format_dtz(new_time)
                try:
                    self.store.save(title, text, document.base_timestamp, self.summary)
                except SaveAttemptFailed as e:
                    log.warning("save of %s failed (attempt %d/%d): %s",
                                title, attempt, self.max_attempts, e)
                    last_error = e
                    continue
                self.limiter.mark(state)
                return format_dtz(new_time)
        raise SaveError(last_error)
