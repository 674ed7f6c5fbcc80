from __future__ import annotations

import logging
from typing import BinaryIO

log = logging.getLogger(__name__)


class PDFWriteError(OSError):
    """Raised when the output sink fails while a document is being written."""


class ShortWriteError(PDFWriteError):
    """The sink accepted fewer bytes than it was given."""


class CountingWriter:
    """
    Byte sink wrapper that tracks the output offset.

    The first failure is kept as a sticky error: every later write becomes a
    no-op and the offset stops moving, so offsets recorded afterwards are
    never trusted.
    """

    def __init__(self, sink: BinaryIO):
        self._sink = sink
        self._offset = 0
        self._error: PDFWriteError | None = None

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def error(self) -> PDFWriteError | None:
        return self._error

    @property
    def failed(self) -> bool:
        return self._error is not None

    def write(self, data: bytes) -> None:
        if self._error is not None:
            return
        # A closed file object raises ValueError rather than OSError.
        try:
            written = self._sink.write(data)
        except (OSError, ValueError) as e:
            self._fail(PDFWriteError(f"write failed at offset {self._offset}: {e}"), e)
            return
        # Buffered file objects may return None; treat that as a full write.
        if written is not None and written < len(data):
            self._fail(
                ShortWriteError(
                    f"short write at offset {self._offset}: {written} of {len(data)} bytes"
                )
            )
            return
        self._offset += len(data)

    def line(self, data: bytes) -> None:
        self.write(data + b"\n")

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if self._error is not None or flush is None:
            return
        try:
            flush()
        except (OSError, ValueError) as e:
            self._fail(PDFWriteError(f"flush failed: {e}"), e)

    def _fail(self, error: PDFWriteError, cause: BaseException | None = None) -> None:
        error.__cause__ = cause
        self._error = error
        log.warning("PDF output failed: %s", error)
