import shutil
import unittest
import uuid
from datetime import datetime
from pathlib import Path

from PIL import Image

from jpegpdf.cli import build_parser, main
from jpegpdf.sources import collect_jpeg_files, probe_jpeg


class TestCli(unittest.TestCase):
    def setUp(self):
        tmp_root = Path(__file__).resolve().parents[1] / ".test_scratch"
        tmp_root.mkdir(parents=True, exist_ok=True)
        self.root = tmp_root / f"jpegs_{uuid.uuid4().hex}"
        self.root.mkdir()

    def tearDown(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def _jpeg(self, name: str, size: tuple[int, int], mode: str = "RGB") -> Path:
        path = self.root / name
        Image.new(mode, size).save(path, "JPEG")
        return path

    def test_parser_defaults(self):
        args = build_parser().parse_args(["a.jpg", "-o", "out.pdf"])
        self.assertEqual(args.dpi, 150)
        self.assertIsNone(args.title)
        self.assertEqual(args.log_level, "INFO")

    def test_collect_jpeg_files_sorts_directories(self):
        self._jpeg("b.jpg", (10, 10))
        self._jpeg("a.JPEG", (10, 10))
        (self.root / "notes.txt").write_text("skip", encoding="utf-8")
        extra = self._jpeg("z.jpg", (10, 10))

        files = collect_jpeg_files([extra, self.root])
        self.assertEqual([f.name for f in files], ["z.jpg", "a.JPEG", "b.jpg", "z.jpg"])

    def test_probe_jpeg(self):
        src = probe_jpeg(self._jpeg("p.jpg", (40, 30), mode="L"))
        self.assertEqual((src.width, src.height, src.mode), (40, 30, "L"))
        self.assertIsInstance(src.mtime, datetime)

    def test_probe_rejects_non_jpeg(self):
        path = self.root / "fake.jpg"
        Image.new("RGB", (5, 5)).save(path, "PNG")
        with self.assertRaises(ValueError):
            probe_jpeg(path)

    def test_main_writes_pdf(self):
        self._jpeg("01.jpg", (300, 150))
        self._jpeg("02.jpg", (150, 150), mode="L")
        out_pdf = self.root / "out" / "scans.pdf"

        with self.assertLogs("jpegpdf.cli", level="WARNING") as logs:
            code = main([str(self.root), "-o", str(out_pdf), "--log-level", "ERROR"])
        self.assertEqual(code, 0)
        self.assertTrue(any("declared as RGB" in line for line in logs.output))

        blob = out_pdf.read_bytes()
        self.assertTrue(blob.startswith(b"%PDF-1.3"))
        self.assertIn(b"/Title (scans)", blob)
        self.assertIn(b"/Count 2", blob)
        self.assertIn(b"/MediaBox [0 0 144.00 72.00]", blob)
        self.assertTrue(blob.endswith(b"%%EOF\n"))

    def test_main_honours_title_and_dpi(self):
        self._jpeg("x.jpg", (300, 300))
        out_pdf = self.root / "x.pdf"
        code = main([str(self.root / "x.jpg"), "-o", str(out_pdf), "--title", "My Doc", "--dpi", "300"])
        self.assertEqual(code, 0)
        blob = out_pdf.read_bytes()
        self.assertIn(b"/Title (My Doc)", blob)
        self.assertIn(b"/MediaBox [0 0 72.00 72.00]", blob)

    def test_main_missing_input(self):
        code = main([str(self.root / "missing.jpg"), "-o", str(self.root / "o.pdf")])
        self.assertEqual(code, 1)
        self.assertFalse((self.root / "o.pdf").exists())

    def test_main_rejects_non_finite_dpi(self):
        self._jpeg("x.jpg", (10, 10))
        for dpi in ("nan", "inf", "0"):
            code = main([str(self.root), "-o", str(self.root / "o.pdf"), "--dpi", dpi])
            self.assertEqual(code, 2)
        self.assertFalse((self.root / "o.pdf").exists())

    def test_main_no_jpegs(self):
        code = main([str(self.root), "-o", str(self.root / "o.pdf")])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
