from __future__ import annotations

import logging
from collections.abc import Iterable

from .counting import CountingWriter
from .syntax import xref_entry

log = logging.getLogger(__name__)


class ObjectLedger:
    """
    Assigns object numbers and records the offset each object starts at.

    Numbers are handed out by ``allocate()`` before anything is written, so
    callers can cross-reference objects that come later in the file. Objects
    must still be written in allocation order: the xref table is built from
    offsets in the order they were recorded.
    """

    def __init__(self, out: CountingWriter):
        self.out = out
        self._obj_offsets: list[int] = []
        self._next_obj_num = 1

    @property
    def object_count(self) -> int:
        return self._next_obj_num - 1

    @property
    def offsets(self) -> tuple[int, ...]:
        return tuple(self._obj_offsets)

    def allocate(self) -> int:
        obj_num = self._next_obj_num
        self._next_obj_num += 1
        return obj_num

    def begin_object(self, obj_num: int) -> None:
        expected = len(self._obj_offsets) + 1
        if obj_num >= self._next_obj_num:
            raise RuntimeError(f"object {obj_num} was never allocated")
        if obj_num != expected:
            raise RuntimeError(f"object {obj_num} written out of order, expected {expected}")
        self._obj_offsets.append(self.out.offset)
        self.out.line(b"%d 0 obj" % obj_num)

    def end_object(self) -> None:
        self.out.line(b"endobj")

    def begin_dict(self, obj_num: int) -> None:
        self.begin_object(obj_num)
        self.out.line(b"<<")

    def end_dict(self) -> None:
        self.out.line(b">>")
        self.end_object()

    def write_dict_object(self, obj_num: int, entries: Iterable[bytes]) -> None:
        self.begin_dict(obj_num)
        for entry in entries:
            self.out.line(entry)
        self.end_dict()

    def write_stream_object(self, obj_num: int, entries: Iterable[bytes], payload: bytes) -> None:
        self.begin_dict(obj_num)
        for entry in entries:
            self.out.line(entry)
        self.out.line(b"/Length %d" % len(payload))
        self.out.line(b">>")
        self.out.line(b"stream")
        self.out.write(payload)
        self.out.write(b"\n")
        self.out.line(b"endstream")
        self.end_object()
        log.debug("object %d: stream of %d bytes", obj_num, len(payload))

    def write_xref(self) -> int:
        """Write the cross-reference section and return the offset of ``xref``."""
        if len(self._obj_offsets) != self.object_count:
            missing = list(range(len(self._obj_offsets) + 1, self._next_obj_num))
            raise RuntimeError(f"objects allocated but never written: {missing}")

        xref_offset = self.out.offset
        self.out.line(b"xref")
        self.out.line(b"0 %d" % (self.object_count + 1))
        self.out.write(xref_entry(0, 65535, in_use=False))
        for off in self._obj_offsets:
            self.out.write(xref_entry(off))
        return xref_offset
