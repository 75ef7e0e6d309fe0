"""
utils/logo_processor.py
────────────────────────────────────────────
Logo-Verarbeitung für QR-Codes:
Data-URL ↔ Bytes, erlaubte Bildtypen,
Kontur (Stroke) hinter dem Logo.
────────────────────────────────────────────
"""

from __future__ import annotations

import base64
import binascii
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw

ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/svg+xml"}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


def bytes_to_data_url(data: bytes, mime: str = "image/png") -> str:
    """Bytes als Base64-Data-URL kodieren."""
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def data_url_to_bytes(value: str) -> Tuple[Optional[str], bytes]:
    """
    Base64-Data-URL (oder reinen Base64-String) in (mime, bytes) zerlegen.
    Ungültiges Base64 → ValueError.
    """
    match = _DATA_URL_RE.match(value.strip())
    mime, payload = (match.group("mime"), match.group("data")) if match else (None, value.strip())
    try:
        return mime, base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image payload is not valid base64") from exc


def is_valid_image_type(mime: Optional[str]) -> bool:
    return (mime or "").lower() in ALLOWED_IMAGE_TYPES


def load_image(value: str) -> Image.Image:
    """Eingebettetes Bild (Data-URL) als RGBA öffnen."""
    mime, raw = data_url_to_bytes(value)
    if mime is not None and not is_valid_image_type(mime):
        raise ValueError(f"Unsupported image type: {mime}")
    with Image.open(BytesIO(raw)) as img:
        return img.convert("RGBA")


def add_logo_stroke(logo: Image.Image, stroke_width: int, stroke_color: str) -> Image.Image:
    """
    Logo mittig auf eine quadratische Fläche setzen, dahinter ein
    abgerundetes Rechteck in der Konturfarbe (Rand = stroke_width).
    """
    logo = logo.convert("RGBA")
    padding = max(stroke_width, 0) * 2
    canvas_size = max(logo.width, logo.height) + padding
    canvas = Image.new("RGBA", (canvas_size, canvas_size), (0, 0, 0, 0))

    x = (canvas_size - logo.width) // 2
    y = (canvas_size - logo.height) // 2

    if stroke_width > 0:
        draw = ImageDraw.Draw(canvas)
        draw.rounded_rectangle(
            (
                x - stroke_width,
                y - stroke_width,
                x + logo.width + stroke_width - 1,
                y + logo.height + stroke_width - 1,
            ),
            radius=stroke_width,
            fill=ImageColor.getcolor(stroke_color, "RGBA"),
        )

    canvas.alpha_composite(logo, dest=(x, y))
    return canvas


def apply_stroke_to_logo(image_data_url: str, stroke_width: int, stroke_color: str) -> str:
    """Data-URL rein, PNG-Data-URL mit Kontur raus."""
    processed = add_logo_stroke(load_image(image_data_url), stroke_width, stroke_color)
    buf = BytesIO()
    processed.save(buf, format="PNG")
    return bytes_to_data_url(buf.getvalue())
