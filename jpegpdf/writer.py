from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from reportlab.lib.units import inch

from .counting import CountingWriter, PDFWriteError
from .ledger import ObjectLedger
from .syntax import pdf_date, pdf_number, pdf_ref, pdf_text_string
from .version import __version__

log = logging.getLogger(__name__)

DPI = 150

PDF_HEADER = b"%PDF-1.3\n%\xe2\xe3\xcf\xd3\n"

# Placeholder document identifier, written twice into the trailer /ID.
DEFAULT_DOCUMENT_ID = "deadbeef"

IMAGE_NAME = b"I"


@dataclass(frozen=True)
class PageObjects:
    """Object numbers belonging to one page, allocated before it is written."""

    page: int
    contents: int
    image: int | None = None


def pixels_to_points(pixels: int, dpi: float = DPI) -> float:
    return pixels / dpi * inch


class PDFDocumentWriter:
    """
    Stream-oriented PDF writer for JPEG pages.

    Writes each page as soon as it is given, then the page tree, catalog,
    xref table and trailer in ``finalize()``. Nothing but the object offsets
    and page numbers is kept in memory.

    Sink failures are sticky: once a write fails, all later output is
    dropped and ``finalize()`` raises the first error. Call ``check()`` to
    fail earlier.
    """

    def __init__(self, sink: BinaryIO, document_id: str = DEFAULT_DOCUMENT_ID):
        self.out = CountingWriter(sink)
        self.ledger = ObjectLedger(self.out)
        self.document_id = document_id
        self._page_ids: list[int] = []
        self._info_id: int | None = None
        self._finalized = False

        self.out.write(PDF_HEADER)

    @classmethod
    @contextmanager
    def open(cls, out_path: Path, **kwargs) -> Iterator[PDFDocumentWriter]:
        """Open ``out_path`` for writing; the file is closed on exit."""
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("wb") as f:
            yield cls(f, **kwargs)

    @property
    def offset(self) -> int:
        return self.out.offset

    @property
    def error(self) -> PDFWriteError | None:
        return self.out.error

    @property
    def page_ids(self) -> tuple[int, ...]:
        return tuple(self._page_ids)

    @property
    def page_count(self) -> int:
        return len(self._page_ids)

    @property
    def info_id(self) -> int | None:
        return self._info_id

    def check(self) -> None:
        if self.out.error is not None:
            raise self.out.error

    def _ensure_open(self, operation: str) -> None:
        if self._finalized:
            raise RuntimeError(f"{operation} called after finalize")

    def write_info(self, title: str, timestamp: datetime) -> int:
        self._ensure_open("write_info")
        if self._info_id is not None:
            raise RuntimeError("document info already written")
        if self._page_ids:
            raise RuntimeError("document info must be written before any page")

        self._info_id = self.ledger.allocate()
        date = pdf_date(timestamp)
        self.ledger.write_dict_object(
            self._info_id,
            (
                b"/Title " + pdf_text_string(title),
                b"/CreationDate " + date,
                b"/ModDate " + date,
                b"/Producer " + pdf_text_string(f"jpegpdf {__version__}"),
            ),
        )
        return self._info_id

    def _page_entries(self, objs: PageObjects, width: float, height: float) -> list[bytes]:
        box = b"[0 0 %s %s]" % (pdf_number(width), pdf_number(height))
        entries = [
            b"/Type /Page",
            b"/MediaBox " + box,
            b"/CropBox " + box,
            b"/Contents " + pdf_ref(objs.contents),
        ]
        if objs.image is not None:
            entries.append(
                b"/Resources << /XObject << /%s %s >> >>" % (IMAGE_NAME, pdf_ref(objs.image))
            )
        return entries

    def write_page(self, width: float, height: float, content: bytes) -> int:
        """Write a page of ``width`` x ``height`` points with a raw content stream."""
        self._ensure_open("write_page")
        _check_size(width, height)

        objs = PageObjects(page=self.ledger.allocate(), contents=self.ledger.allocate())
        self.ledger.write_dict_object(objs.page, self._page_entries(objs, width, height))
        self.ledger.write_stream_object(objs.contents, (), content)
        return self._add_page(objs)

    def write_image_page(
        self,
        pixel_width: int,
        pixel_height: int,
        jpeg: bytes,
        dpi: float = DPI,
    ) -> int:
        """Write a page showing a JPEG image scaled to fill it at ``dpi``."""
        self._ensure_open("write_image_page")
        _check_size(pixel_width, pixel_height)
        if not (math.isfinite(dpi) and dpi > 0):
            raise ValueError(f"dpi must be positive, got {dpi}")

        width = pixels_to_points(pixel_width, dpi)
        height = pixels_to_points(pixel_height, dpi)
        objs = PageObjects(
            page=self.ledger.allocate(),
            contents=self.ledger.allocate(),
            image=self.ledger.allocate(),
        )
        self.ledger.write_dict_object(objs.page, self._page_entries(objs, width, height))

        program = (
            b"q\n"
            + b"%s 0 0 %s 0 0 cm\n" % (pdf_number(width), pdf_number(height))
            + b"/%s Do\n" % IMAGE_NAME
            + b"Q\n"
        )
        self.ledger.write_stream_object(objs.contents, (), program)
        self._write_image_object(objs.image, pixel_width, pixel_height, jpeg)
        return self._add_page(objs)

    def _write_image_object(self, obj_num: int, pixel_width: int, pixel_height: int, jpeg: bytes) -> None:
        # DCTDecode keeps the JPEG payload as-is; colour space is always declared RGB.
        self.ledger.write_stream_object(
            obj_num,
            (
                b"/Type /XObject",
                b"/Subtype /Image",
                b"/Name /%s" % IMAGE_NAME,
                b"/Filter [ /DCTDecode ]",
                b"/Width %d" % pixel_width,
                b"/Height %d" % pixel_height,
                b"/ColorSpace /DeviceRGB",
                b"/BitsPerComponent 8",
            ),
            jpeg,
        )

    def _add_page(self, objs: PageObjects) -> int:
        self._page_ids.append(objs.page)
        log.debug(
            "page %d written (object %d, offset now %d)",
            len(self._page_ids),
            objs.page,
            self.out.offset,
        )
        return objs.page

    def finalize(self) -> None:
        """Write page tree, catalog, xref and trailer; raise the first sink error."""
        self._ensure_open("finalize")
        self._finalized = True

        pages_id = self.ledger.allocate()
        kids = b"".join(pdf_ref(pid) + b" " for pid in self._page_ids)
        self.ledger.write_dict_object(
            pages_id,
            (
                b"/Type /Pages",
                b"/Kids [ " + kids + b"]",
                b"/Count %d" % len(self._page_ids),
            ),
        )
        self.check()

        root_id = self.ledger.allocate()
        self.ledger.write_dict_object(
            root_id,
            (b"/Type /Catalog", b"/Pages " + pdf_ref(pages_id)),
        )

        xref_offset = self.ledger.write_xref()

        doc_id = self.document_id.encode("ascii")
        self.out.line(b"trailer")
        self.out.line(b"<<")
        self.out.line(b"/Size %d" % (self.ledger.object_count + 1))
        if self._info_id is not None:
            self.out.line(b"/Info " + pdf_ref(self._info_id))
        self.out.line(b"/Root " + pdf_ref(root_id))
        self.out.line(b"/ID [<%s> <%s>]" % (doc_id, doc_id))
        self.out.line(b">>")
        self.out.line(b"startxref")
        self.out.line(b"%d" % xref_offset)
        self.out.line(b"%%EOF")
        self.out.flush()
        self.check()

        log.debug(
            "finalized: %d pages, %d objects, %d bytes",
            len(self._page_ids),
            self.ledger.object_count,
            self.out.offset,
        )


def _check_size(width: float, height: float) -> None:
    if not all(math.isfinite(v) and v > 0 for v in (width, height)):
        raise ValueError(f"page size must be positive, got {width} x {height}")
