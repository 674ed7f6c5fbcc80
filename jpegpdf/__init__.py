"""
Single-pass PDF writer for JPEG-backed pages.
"""

from .counting import CountingWriter, PDFWriteError, ShortWriteError
from .ledger import ObjectLedger
from .version import __version__
from .writer import DPI, PageObjects, PDFDocumentWriter

__all__ = [
    "DPI",
    "CountingWriter",
    "ObjectLedger",
    "PDFDocumentWriter",
    "PDFWriteError",
    "PageObjects",
    "ShortWriteError",
    "__version__",
]
