from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)

JPEG_SUFFIXES = {".jpg", ".jpeg", ".jpe", ".jfif"}


@dataclass(frozen=True)
class JPEGSource:
    path: Path
    width: int
    height: int
    mode: str
    mtime: datetime

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def collect_jpeg_files(inputs: list[Path]) -> list[Path]:
    """
    Expand inputs into an ordered list of JPEG files.

    Files are kept in the order given; directories contribute their JPEG
    files sorted by name (not recursive).
    """
    files: list[Path] = []
    for p in inputs:
        if p.is_dir():
            children = sorted(
                (c for c in p.iterdir() if c.is_file() and c.suffix.lower() in JPEG_SUFFIXES),
                key=lambda c: c.name,
            )
            if not children:
                log.warning("no JPEG files in %s", p)
            files.extend(children)
        else:
            files.append(p)
    return files


def probe_jpeg(path: Path) -> JPEGSource:
    """Read pixel size and colour mode from the JPEG header without decoding pixels."""
    try:
        with Image.open(path) as img:
            if img.format != "JPEG":
                raise ValueError(f"{path}: not a JPEG file ({img.format})")
            width, height = img.size
            mode = img.mode
    except UnidentifiedImageError as e:
        raise ValueError(f"{path}: not a recognised image") from e

    mtime = datetime.fromtimestamp(path.stat().st_mtime)
    return JPEGSource(path=path, width=width, height=height, mode=mode, mtime=mtime)
