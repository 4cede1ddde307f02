"""
wikitext.py
===========
Locates the ``author`` and ``date`` fields of an {{Information}}-style
template in file-page wikitext.

Comments and <nowiki>, <pre> and <math> blocks are blanked with spaces before
searching, so a field name inside them is never matched. Blanking keeps the
length of the text, so every offset found in the masked text is valid in the
original.
"""

import re
from typing import List, Tuple

from .models import FieldPositions, FieldSpan

# (start tag, end tag) pairs. Regions are assumed not to nest.
OPAQUE_TAGS = (
    ("<!--", "-->"),
    ("<nowiki>", "</nowiki>"),
    ("<pre>", "</pre>"),
    ("<math>", "</math>"),
)

# re.ASCII keeps IGNORECASE from matching e.g. KELVIN SIGN against "k".
_FLAGS = re.IGNORECASE | re.ASCII
_START_RE = re.compile(
    "|".join(f"(?P<t{i}>{re.escape(start)})" for i, (start, _) in enumerate(OPAQUE_TAGS)),
    _FLAGS,
)
_END_RES = [re.compile(re.escape(end), _FLAGS) for _, end in OPAQUE_TAGS]


def opaque_spans(text: str) -> List[Tuple[int, int]]:
    """Return the ``[start, end)`` spans of all opaque regions, left to right.

    An unterminated region runs to the end of the text and ends the scan.
    """
    spans = []
    pos = 0
    while True:
        start = _START_RE.search(text, pos)
        if start is None:
            break
        kind = int(start.lastgroup[1:])
        end = _END_RES[kind].search(text, start.end())
        if end is None:
            spans.append((start.start(), len(text)))
            break
        spans.append((start.start(), end.end()))
        pos = end.end()
    return spans


def mask_opaque_regions(text: str) -> str:
    """Replace every opaque region, tags included, with spaces."""
    spans = opaque_spans(text)
    if not spans:
        return text
    parts = []
    prev = 0
    for start, end in spans:
        parts.append(text[prev:start])
        parts.append(" " * (end - start))
        prev = end
    parts.append(text[prev:])
    return "".join(parts)


def find_field(text: str, field: str) -> FieldSpan:
    """Span of the first line of ``|field =`` in text, or a not-found span.

    Only the first line of a field is considered; multi-line values are not
    parsed.
    """
    match = re.search(r"\|\s*" + re.escape(field) + r"\s*=", text, re.IGNORECASE)
    if match is None:
        return FieldSpan()
    start = match.end()
    newline = text.find("\n", start)
    if newline == -1:
        # text truncated?
        return FieldSpan(start, len(text))
    return FieldSpan(start, newline)


def find_positions(text: str) -> FieldPositions:
    """Find the author and date fields; offsets index into ``text`` itself."""
    masked = mask_opaque_regions(text)
    return FieldPositions(
        author=find_field(masked, "author"),
        date=find_field(masked, "date"),
    )


def replace_span(text: str, span: FieldSpan, value: str) -> str:
    return text[:span.start] + value + text[span.end:]
