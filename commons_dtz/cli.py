"""
cli.py
======
Command line front end: set the dates of a user's Commons uploads from Exif
with {{DTZ}} time zones.

Default mode is dry-run. Use --apply to save edits.

Examples:
    dtz-bot --camera 900 --location America/New_York --first "File:A.jpg" --last "File:B.jpg"
    dtz-bot --location Europe/Paris --first "File:A.jpg" --model "canon" --apply

Timezones are either numeric (HHMM, e.g. 1000 or -800) or a tz database name
such as "Africa/Abidjan". If only one is given it is used for both. The range
is every upload by the same user between the two files, in upload order; the
order of --first and --last does not matter. Edits are limited to one per
five seconds.
"""

import argparse
import io
import logging
import os
import sys

from .config import configure_logging, load_settings
from .editor import ConflictAwareEditor
from .errors import ConfigError, QueryError
from .identity import connect, resolve_identity
from .scanner import RangeScanner, resolve_range
from .store import CommonsStore
from .throttle import RateLimiter, shared_rate_state
from .zones import parse_zone, resolve_zones

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtz-bot",
        description="Set dates of Commons files from Exif, adjusted to the local time zone.",
    )
    parser.add_argument("--camera", default="", help="Time zone set in the camera.")
    parser.add_argument("--location", default="", help="Time zone where the pictures were taken.")
    parser.add_argument("--first", default="", help="First file in range (title or Commons URL).")
    parser.add_argument("--last", default="", help="Last file in range (title or Commons URL).")
    parser.add_argument("--author", default="", help="Only edit pages whose author field contains this text.")
    parser.add_argument("--model", default="", help="Only edit files whose Exif camera model contains this text.")
    parser.add_argument("--apply", action="store_true", help="Save edits (default is dry-run).")
    parser.add_argument("--max-edits", type=int, default=0, help="Max edits for this run (0 = no limit).")
    return parser


def describe(error: Exception) -> str:
    title = getattr(error, "title", None)
    return f"{title}: {error}" if title else str(error)


def stream(lines, out) -> bool:
    """Write each line as soon as it is produced.

    Returns False when ``out`` went away; the scan is then stopped by closing
    the generator.
    """
    try:
        for line in lines:
            out.write(line + "\n")
            out.flush()
    except BrokenPipeError:
        lines.close()
        return False
    return True


def main(argv=None) -> int:
    if sys.platform == "win32":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        camera, location = resolve_zones(parse_zone(args.camera), parse_zone(args.location))
        site = connect(settings)
        username = resolve_identity(site)
        store = CommonsStore(site)
        first, last = resolve_range(store, args.first, args.last)
    except (ConfigError, QueryError) as e:
        print(f"Error: {describe(e)}", file=sys.stderr)
        return 2

    editor = ConflictAwareEditor(
        store, RateLimiter(), author_filter=args.author.strip(), dry_run=not args.apply,
    )
    scanner = RangeScanner(
        store, editor, camera, location,
        model_filter=args.model.strip(),
        state=shared_rate_state(username),
        max_edits=args.max_edits,
    )
    print(f"Editing as user {username}" + ("" if args.apply else " (dry run)"), flush=True)
    if not stream(scanner.run(first.user, first.upload_time, last.upload_time), sys.stdout):
        # Python flushes stdout at exit; point it somewhere harmless.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        log.info("output closed; stopped early")
    return 0


if __name__ == "__main__":
    sys.exit(main())
