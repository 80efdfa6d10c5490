# services_images.py — recompression of oversized camp photos before upload
import io
import logging

from PIL import Image, ImageOps

from errors import CompressionError
from utils import format_file_size

log = logging.getLogger(__name__)

MB = 1024 * 1024
MAX_FILE_SIZE_MB = 5          # bucket limit
TARGET_MARGIN_MB = 0.5
MAX_DIMENSION = 2048
QUALITY_STEPS = (90, 85, 80, 75, 70, 60, 50, 40, 30)

_CONTENT_TYPES = {"JPEG": "image/jpeg", "WEBP": "image/webp"}


def needs_compression(upload, max_size_mb=MAX_FILE_SIZE_MB) -> bool:
    return upload.size > max_size_mb * MB


def _progress_reporter(on_progress):
    last = [0]

    def report(pct):
        pct = max(last[0], min(100, int(pct)))
        last[0] = pct
        if on_progress:
            on_progress(pct)
    return report


def _encode(im, fmt, quality):
    buf = io.BytesIO()
    if fmt == "WEBP":
        im.save(buf, format="WEBP", quality=quality, method=6)
    else:
        im.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def compress_image(upload, on_progress=None, max_size_mb=MAX_FILE_SIZE_MB, max_dimension=MAX_DIMENSION):
    """
    Returns `upload` untouched when it is within `max_size_mb`.
    Otherwise returns a copy re-encoded to at most (max_size_mb - 0.5) MB with
    the longer edge capped at `max_dimension`. JPEG and WEBP keep their format,
    anything else becomes JPEG. Progress percentages never decrease.
    """
    if not needs_compression(upload, max_size_mb):
        log.info("%s is %s, no compression needed", upload.name, format_file_size(upload.size))
        return upload

    target = int((max_size_mb - TARGET_MARGIN_MB) * MB)
    report = _progress_reporter(on_progress)
    report(0)
    log.info("Compressing %s from %s...", upload.name, format_file_size(upload.size))

    try:
        im = Image.open(io.BytesIO(upload.data))
        src_format = im.format
        im.load()
        im = ImageOps.exif_transpose(im)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CompressionError(f"Failed to compress image: {e}", file=upload.name) from e

    fmt = src_format if src_format in _CONTENT_TYPES else "JPEG"
    if fmt == "JPEG" and im.mode not in ("RGB", "L"):
        im = im.convert("RGB")
    im.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
    report(10)

    for n, quality in enumerate(QUALITY_STEPS, 1):
        try:
            data = _encode(im, fmt, quality)
        except (OSError, ValueError) as e:
            raise CompressionError(f"Failed to compress image: {e}", file=upload.name) from e
        if len(data) <= target:
            report(100)
            log.info("Compressed %s to %s (q=%s)", upload.name, format_file_size(len(data)), quality)
            return upload.with_data(data, _CONTENT_TYPES[fmt])
        report(10 + 90 * n / len(QUALITY_STEPS))

    raise CompressionError(
        f"Failed to compress image: {upload.name} stays above {format_file_size(target)}",
        file=upload.name,
    )
