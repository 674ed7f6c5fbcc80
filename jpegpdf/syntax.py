from __future__ import annotations

from datetime import datetime, timedelta

_LITERAL_ESCAPES = str.maketrans({
    "\\": "\\\\",
    "(": "\\(",
    ")": "\\)",
    "\n": "\\n",
    "\r": "\\r",
})


def pdf_escape_literal(s: str) -> str:
    """Escape backslashes, parentheses and line breaks for a ``(...)`` string."""
    return s.translate(_LITERAL_ESCAPES)


def pdf_text_string(s: str) -> bytes:
    """
    Encode a text string for use in a dictionary value.

    ASCII goes out as a literal string; anything else as a UTF-16BE hex
    string with a byte order mark.
    """
    if s.isascii():
        return b"(" + pdf_escape_literal(s).encode("ascii") + b")"
    return b"<FEFF" + s.encode("utf-16-be").hex().upper().encode("ascii") + b">"


def pdf_number(value: float) -> bytes:
    return b"%.2f" % value


def pdf_ref(obj_id: int) -> bytes:
    return b"%d 0 R" % obj_id


def pdf_date(ts: datetime) -> bytes:
    """Format a timestamp as a PDF date string, e.g. ``(D:20240131235959)``."""
    out = "D:" + ts.strftime("%Y%m%d%H%M%S")
    offset = ts.utcoffset()
    if offset is not None:
        if offset == timedelta(0):
            out += "Z"
        else:
            sign = "+" if offset > timedelta(0) else "-"
            minutes = abs(int(offset.total_seconds())) // 60
            out += f"{sign}{minutes // 60:02d}'{minutes % 60:02d}'"
    return b"(" + out.encode("ascii") + b")"


def xref_entry(offset: int, generation: int = 0, in_use: bool = True) -> bytes:
    # Fixed 20-byte entry: 10-digit offset, 5-digit generation, type, 2-byte EOL.
    return b"%010d %05d %s \n" % (offset, generation, b"n" if in_use else b"f")
