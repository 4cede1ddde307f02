"""
errors.py
=========
Exception hierarchy for the DTZ bot.

Record-level errors (``ParseError`` and every ``EditError``) are reported
inline for the record and never stop a run. ``ConfigError`` aborts a run
before any record is processed. ``QueryError`` marks a single unusable page
of query results.
"""


class DtzError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(DtzError):
    """Bad zone spec, bad file name, missing credentials or identity problem."""


class ParseError(DtzError):
    """Malformed capture timestamp."""


class QueryError(DtzError):
    """Query results, or one entry in them, could not be read."""

    def __init__(self, message, title=None):
        super().__init__(message)
        self.title = title


class EditError(DtzError):
    """Base class for the reasons an edit was not made."""


class FilterMismatch(EditError):
    pass


class FieldNotFound(EditError):
    pass


class NoChangeNeeded(EditError):
    pass


class FetchError(EditError):
    """The current page text could not be fetched; never retried."""


class SaveAttemptFailed(EditError):
    """One save attempt was rejected (edit conflict, maxlag, ...)."""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


class SaveError(EditError):
    """Every save attempt failed."""

    def __init__(self, last_error):
        super().__init__(f"failed to save: {last_error}")
        self.last_error = last_error
