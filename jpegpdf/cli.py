import argparse
import logging
import math
import sys
from pathlib import Path

from .sources import collect_jpeg_files, probe_jpeg
from .version import __version__
from .writer import DPI, PDFDocumentWriter


log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jpegpdf",
        description="Wrap JPEG images into a PDF, one page per image, without re-encoding.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  jpegpdf scans/ -o scans.pdf
  jpegpdf page1.jpg page2.jpg -o out.pdf --title "Letter"
  jpegpdf photos/ -o photos.pdf --dpi 300
        """,
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"jpegpdf {__version__}"
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="INPUT",
        help="JPEG files or directories of JPEG files (pages follow argument order)",
    )
    parser.add_argument(
        "-o", "--output", required=True,
        help="Output PDF path",
    )
    parser.add_argument(
        "--title",
        default=None,
        help="Document title (default: output file name without extension)",
    )
    parser.add_argument(
        "--dpi",
        type=float,
        default=DPI,
        help=f"Resolution used to size pages from pixel dimensions (default: {DPI})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level (default: INFO)",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )
    # Keep Pillow quiet unless explicitly debugging.
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _run(args: argparse.Namespace) -> int:
    if not (math.isfinite(args.dpi) and args.dpi > 0):
        log.error("Error: --dpi must be a positive number")
        return 2

    files = collect_jpeg_files([Path(p) for p in args.inputs])
    if not files:
        log.error("Error: no JPEG files found")
        return 1

    sources = []
    for path in files:
        try:
            src = probe_jpeg(path)
        except (OSError, ValueError) as e:
            log.error("Error: %s", e)
            return 1
        if src.mode != "RGB":
            log.warning("%s: %s image will be declared as RGB", path, src.mode)
        sources.append(src)

    out_path = Path(args.output)
    title = args.title if args.title is not None else out_path.stem
    timestamp = max(src.mtime for src in sources)

    try:
        with PDFDocumentWriter.open(out_path) as writer:
            writer.write_info(title, timestamp)
            for idx, src in enumerate(sources, start=1):
                writer.write_image_page(src.width, src.height, src.read_bytes(), dpi=args.dpi)
                log.debug("[%d/%d] %s (%dx%d)", idx, len(sources), src.path, src.width, src.height)
            writer.finalize()
    except OSError as e:
        log.error("Error: failed to write %s: %s", out_path, e)
        return 1

    log.info("Wrote %d pages to %s", len(sources), out_path.resolve())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.log_level)
    return _run(args)


if __name__ == "__main__":
    sys.exit(main())
