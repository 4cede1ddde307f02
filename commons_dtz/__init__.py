"""Set dates of Wikimedia Commons files from Exif, with {{DTZ}} time zones."""

__version__ = "1.0.0"
