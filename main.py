"""
Image Toolkit - Console entry point.

Decodes the given files, runs one operation over them as a batch and
writes ``<name>_processed.<ext>`` files next to them (or into --out-dir).
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from config import get_settings
from core.constants import SystemConstants
from core.enums import CompressionMode, Operation
from core.image.codec import decode_image, detect_mime_type
from core.mask_canvas import MaskCanvas
from schemas import Rect, Size
from services.processing_service import (
    BatchProgress,
    ProcessingService,
    SourceImage,
    format_file_size,
    is_valid_image_type,
)

logger = logging.getLogger(__name__)


def _parse_size(value: str) -> Size:
    """``640x480`` -> Size(width=640, height=480)"""
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}")
    return Size(width=width, height=height)


def _parse_rect(value: str) -> Rect:
    """``x,y,width,height`` -> Rect"""
    try:
        x, y, width, height = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected x,y,width,height, got {value!r}")
    return Rect(x=x, y=y, width=width, height=height)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batch pixel transformations on image files.")
    parser.add_argument(
        "operation", choices=[op.value for op in Operation], help="Operation to run"
    )
    parser.add_argument("files", nargs="+", type=Path, help="Input images (jpeg or png)")
    parser.add_argument(
        "--out-dir", "-o", type=Path, help="Output directory (default: next to input)"
    )
    parser.add_argument("--size", type=_parse_size, help="Target size for resize, e.g. 800x600")
    parser.add_argument("--rect", type=_parse_rect, help="Crop rectangle x,y,width,height")
    parser.add_argument("--degrees", type=int, default=90, help="Rotation angle (default: 90)")
    parser.add_argument("--strength", type=float, help="Background removal strength 0..1")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CompressionMode],
        help="Compression mode (default: from settings)",
    )
    parser.add_argument("--mask", type=Path, help="Mask image for inpaint (alpha marks pixels)")
    parser.add_argument(
        "--brush",
        action="append",
        default=[],
        metavar="X,Y",
        help="Paint a brush dab on a new mask instead of --mask (repeatable)",
    )
    parser.add_argument("--brush-size", type=int, help="Brush diameter for --brush")
    return parser


def _operation_params(args: argparse.Namespace, parser: argparse.ArgumentParser, first) -> dict:
    operation = Operation(args.operation)

    if operation is Operation.RESIZE:
        if args.size is None:
            parser.error("resize needs --size")
        return {"width": args.size.width, "height": args.size.height}
    if operation is Operation.CROP:
        if args.rect is None:
            parser.error("crop needs --rect")
        return {"rect": args.rect}
    if operation is Operation.ROTATE:
        return {"degrees": args.degrees}
    if operation is Operation.REMOVE_BACKGROUND:
        return {"strength": args.strength}
    if operation is Operation.COMPRESS:
        return {"mode": args.mode}
    if operation is Operation.INPAINT:
        if args.mask:
            try:
                return {"mask": decode_image(args.mask)}
            except ValueError as e:
                parser.error(f"Unreadable --mask {args.mask}: {e}")
        if not args.brush:
            parser.error("inpaint needs --mask or --brush")
        canvas = MaskCanvas(first.width, first.height)
        if args.brush_size:
            canvas.brush_size = args.brush_size
        for dab in args.brush:
            x, y = (float(part) for part in dab.split(","))
            canvas.begin_stroke(x, y)
        return {"mask": canvas.to_mask()}
    return {}


def _load_sources(files: List[Path]) -> List[Tuple[Path, SourceImage]]:
    """Decode every readable image; unreadable or unsupported files are skipped."""
    sources = []
    for path in files:
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        mime_type = detect_mime_type(data)
        if mime_type is None or not is_valid_image_type(mime_type):
            logger.warning(f"Skipping {path.name}: unsupported type {mime_type}")
            continue
        try:
            buffer = decode_image(data)
        except ValueError as e:
            logger.warning(f"Skipping {path.name}: {e}")
            continue
        sources.append(
            (path, SourceImage(name=path.name, buffer=buffer, size=len(data), mime_type=mime_type))
        )
        logger.info(f"Loaded {path.name} ({format_file_size(len(data))})")
    return sources


def _log_progress(progress: BatchProgress) -> None:
    logger.debug(
        f"[{progress.index + 1}/{progress.total}] {progress.percent:.0f}% "
        f"(overall {progress.overall:.0f}%)"
    )


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.system.log_level),
        format=SystemConstants.LOG_FORMAT,
    )

    parser = _build_parser()
    args = parser.parse_args(argv)

    loaded = _load_sources(args.files)
    if not loaded:
        logger.error("No usable input images")
        return 1
    skipped = len(args.files) - len(loaded)
    paths = [path for path, _ in loaded]
    sources = [source for _, source in loaded]

    params = _operation_params(args, parser, sources[0].buffer)
    service = ProcessingService(settings=settings)

    failed = 0
    items = service.process_batch(sources, args.operation, on_progress=_log_progress, **params)
    for path, item in zip(paths, items):
        if not item.ok:
            failed += 1
            continue
        metadata = item.result.metadata
        out_dir = args.out_dir or path.parent
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / metadata.output_name
        out_path.write_bytes(item.result.data)

        summary = f"{metadata.width}x{metadata.height}, {format_file_size(metadata.size)}"
        if metadata.compression_ratio is not None:
            summary += f", saved {metadata.compression_ratio:.1f}%"
        logger.info(f"Wrote {out_path} ({summary})")

    return 1 if failed or skipped else 0


if __name__ == "__main__":
    sys.exit(main())
