"""
utils/qr_export.py
────────────────────────────────────────────
Export gerenderter QR-Codes als Datei:
PNG (512/1024/2048 px), SVG oder A4-PDF.
Dateiname: <basis>_<YYYYMMDD_HHMMSS>.<ext>
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.history import ColorConfig
from utils.qr_generator import ExportFormat, QRRenderer

logger = logging.getLogger(__name__)

PNG_RESOLUTIONS = (512, 1024, 2048)
DEFAULT_PNG_RESOLUTION = 1024

MEDIA_TYPES = {
    ExportFormat.PNG: "image/png",
    ExportFormat.SVG: "image/svg+xml",
    ExportFormat.PDF: "application/pdf",
}


@dataclass(frozen=True)
class ExportResult:
    filename: str
    media_type: str
    content: bytes


def build_export_filename(base: str, fmt: ExportFormat, now: Optional[datetime] = None) -> str:
    stem = re.sub(r"[^\w.-]+", "_", base.strip()).strip("_") or "qr-code"
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{stem}_{stamp}.{ExportFormat(fmt).value}"


async def export_qr_code(
    renderer: QRRenderer,
    payload: str,
    colors: ColorConfig,
    fmt: ExportFormat,
    base_filename: str = "qr-code",
    resolution: Optional[int] = None,
) -> ExportResult:
    """Rendert und verpackt den Export. Ungültige Auflösungen → ValueError."""
    fmt = ExportFormat(fmt)
    if fmt == ExportFormat.PNG:
        resolution = resolution or DEFAULT_PNG_RESOLUTION
        if resolution not in PNG_RESOLUTIONS:
            raise ValueError(f"Unsupported PNG resolution: {resolution}")
    else:
        resolution = None

    content = await renderer.render_export(payload, colors, fmt, resolution)
    if not content:
        raise RuntimeError(f"Failed to export QR code as {fmt.value.upper()}")

    filename = build_export_filename(base_filename, fmt)
    logger.info(f"✅ QR-Code exportiert: {filename} ({len(content)} Bytes)")
    return ExportResult(filename=filename, media_type=MEDIA_TYPES[fmt], content=content)
