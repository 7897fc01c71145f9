"""Entry-point for the OFD to PDF pipeline."""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Union

from ofd_renderer.config import DEFAULT_DPI, ConvertOptions
from ofd_renderer.model.document_model import Document
from ofd_renderer.parser.document_parser import DocumentParser
from ofd_renderer.parser.ofd_loader import ArchiveSource, OfdPackage
from ofd_renderer.renderer.pdf_renderer import PdfRenderer
from ofd_renderer.utils.debug import DebugDumper
from ofd_renderer.utils.errors import OfdError
from ofd_renderer.utils.logger import get_logger, set_quiet

LOGGER = get_logger(__name__)

_notice_shown = False


def _show_notice(silent: bool) -> None:
    global _notice_shown
    if _notice_shown or silent:
        return
    _notice_shown = True
    LOGGER.info("ofd-renderer: converting OFD documents to PDF")


def parse(source: ArchiveSource) -> Document:
    """Load an OFD archive and build the document model without rendering it."""
    return DocumentParser(OfdPackage.load(source)).parse()


def render(
    document: Document,
    archive: Union[OfdPackage, ArchiveSource],
    options: Optional[ConvertOptions] = None,
) -> bytes:
    """Render an already parsed document.

    ``archive`` supplies images and fonts: an opened package, or the path or
    bytes the document was parsed from.
    """
    package = archive if isinstance(archive, OfdPackage) else OfdPackage.load(archive)
    return PdfRenderer(options).render(document, package)


def convert(
    source: ArchiveSource,
    output: Optional[Union[str, Path]] = None,
    options: Optional[ConvertOptions] = None,
    *,
    debug_dir: Optional[Union[str, Path]] = None,
) -> Optional[bytes]:
    """Convert an OFD file or byte string into PDF.

    Returns the PDF bytes, or writes them to ``output`` (creating parent
    directories) and returns ``None``. With ``debug_dir`` the parsed model is
    also dumped there as JSON.
    """
    options = options or ConvertOptions.from_env()
    set_quiet(options.silent)
    _show_notice(options.silent)

    package = OfdPackage.load(source)
    document = DocumentParser(package).parse()
    LOGGER.debug("Parsed %d page(s), %d font(s), %d image(s)", len(document.pages), len(document.fonts), len(document.images))
    if debug_dir is not None:
        DebugDumper(Path(debug_dir)).dump(document)
    pdf_bytes = render(document, package, options)

    if output is None:
        return pdf_bytes
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(pdf_bytes)
    LOGGER.info("Wrote %s", output_path)
    return None


async def convert_async(
    source: ArchiveSource,
    output: Optional[Union[str, Path]] = None,
    options: Optional[ConvertOptions] = None,
) -> Optional[bytes]:
    """Run :func:`convert` in a worker thread."""
    return await asyncio.to_thread(convert, source, output, options)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ofd2pdf", description="Convert OFD documents into PDF")
    parser.add_argument("ofd_file", help="Path to the input .ofd file")
    parser.add_argument("-o", "--output", help="Path of the PDF to write (defaults to the input name)")
    parser.add_argument("--watermark", action="store_true", help="Stamp a small watermark on every page")
    parser.add_argument("--dpi", type=float, default=DEFAULT_DPI, help="Maximum resolution of embedded images")
    parser.add_argument("--font-dir", help="Directory searched first for CJK fallback fonts")
    parser.add_argument("--silent", action="store_true", help="Only report warnings and errors")
    parser.add_argument("--debug", metavar="DIR", help="Dump the parsed document model as JSON into DIR")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)

    ofd_path = Path(args.ofd_file).resolve()
    if not ofd_path.exists():
        LOGGER.error("OFD file not found: %s", ofd_path)
        return 2

    options = ConvertOptions.from_env(
        watermark=args.watermark,
        dpi=args.dpi,
        font_dir=Path(args.font_dir) if args.font_dir else None,
        silent=args.silent,
    )
    output_path = Path(args.output).resolve() if args.output else ofd_path.with_suffix(".pdf")

    try:
        convert(ofd_path, output_path, options, debug_dir=args.debug)
    except OfdError as exc:
        LOGGER.error("Conversion failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
