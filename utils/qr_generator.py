# =============================================================================
# 🧠 QR-Code Renderer
# -----------------------------------------------------------------------------
# Rendert Payload + Farbkonfiguration zu PNG / SVG / PDF.
# Jeder Aufruf baut den Code neu auf (kein geteiltes, veränderliches QR-Objekt),
# Thumbnails und Exporte in anderen Größen beeinflussen sich also nicht.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from io import BytesIO
from typing import Optional, Protocol, Tuple

import qrcode
import qrcode.image.svg
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_M
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.colormasks import (
    HorizontalGradiantColorMask,
    RadialGradiantColorMask,
    SolidFillColorMask,
    VerticalGradiantColorMask,
)
from qrcode.image.styles.moduledrawers import RoundedModuleDrawer
from PIL import Image, ImageColor, ImageDraw, ImageFont

from models.history import ColorConfig, GradientType
from utils.logo_processor import add_logo_stroke, bytes_to_data_url, load_image
from utils.qr_config import LOGO_SIZE_RATIO
from utils.qr_payload import error_correction_for

# ---------------------------------------------------------------------------
# ⚙️ Logging konfigurieren
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    PNG = "png"
    SVG = "svg"
    PDF = "pdf"


class QRRenderer(Protocol):
    async def render_thumbnail(self, payload: str, colors: ColorConfig, size_px: int) -> str: ...

    async def render_export(
        self,
        payload: str,
        colors: ColorConfig,
        fmt: ExportFormat,
        resolution: Optional[int] = None,
    ) -> bytes: ...


# A4 bei 300 dpi
_A4_PX = (2480, 3508)
_PX_PER_MM = 300 / 25.4


def _color(value: str, transparent: bool = False) -> Tuple[int, ...]:
    """Hex/Name → RGB oder RGBA (bei transparentem Hintergrund)."""
    rgba = ImageColor.getcolor(value, "RGBA")
    return rgba if transparent else rgba[:3]


def _is_transparent(colors: ColorConfig) -> bool:
    return bool(colors.transparent_background or colors.background_image)


def _color_mask(colors: ColorConfig):
    transparent = _is_transparent(colors)
    back = _color(colors.background, transparent)
    if transparent:
        back = back[:3] + (0,)
    front = _color(colors.foreground, transparent)

    if not colors.gradient_enabled:
        return SolidFillColorMask(back_color=back, front_color=front)

    second = _color(colors.gradient_secondary_color or colors.foreground, transparent)
    if colors.gradient_type == GradientType.RADIAL:
        return RadialGradiantColorMask(back_color=back, center_color=front, edge_color=second)

    angle = (colors.gradient_rotation or 0) % 360
    start, end = (second, front) if 135 <= angle < 315 else (front, second)
    if 45 <= angle % 180 < 135:
        return VerticalGradiantColorMask(back_color=back, top_color=start, bottom_color=end)
    return HorizontalGradiantColorMask(back_color=back, left_color=start, right_color=end)


def _make_qr(payload: str, colors: ColorConfig) -> qrcode.QRCode:
    level = ERROR_CORRECT_H if error_correction_for(colors) == "H" else ERROR_CORRECT_M
    qr = qrcode.QRCode(version=None, error_correction=level, box_size=10, border=4)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr


# ---------------------------------------------------------------------------
# 🧩 Hauptfunktion: generate_qr_image
# ---------------------------------------------------------------------------
def generate_qr_image(payload: str, colors: ColorConfig, size: int = 600) -> Image.Image:
    """Erzeugt den QR-Code als RGBA-Bild der Kantenlänge `size`."""

    # === 1️⃣ QR-Code Basis ===
    qr = _make_qr(payload, colors)

    # === 2️⃣ Module + Farbmaske ===
    img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=RoundedModuleDrawer(),
        color_mask=_color_mask(colors),
    ).convert("RGBA")

    # === 3️⃣ Hintergrundbild ===
    if colors.background_image:
        try:
            bg = load_image(colors.background_image.image).resize(img.size, Image.Resampling.LANCZOS)
            opacity = min(max(colors.background_image.opacity, 0.0), 1.0)
            alpha = bg.getchannel("A").point(lambda a: int(a * opacity))
            bg.putalpha(alpha)
            img = Image.alpha_composite(bg, img)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Hintergrundbild konnte nicht eingebettet werden: {e}")

    # === 4️⃣ Logo einfügen ===
    if colors.logo:
        try:
            logo = add_logo_stroke(
                load_image(colors.logo.image),
                colors.logo.stroke_width,
                colors.logo.stroke_color,
            )
            logo_size = int(img.width * LOGO_SIZE_RATIO)
            logo.thumbnail((logo_size, logo_size), Image.Resampling.LANCZOS)
            pos = ((img.width - logo.width) // 2, (img.height - logo.height) // 2)
            img.alpha_composite(logo, dest=pos)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Logo konnte nicht eingebettet werden: {e}")

    # === 5️⃣ Finale Skalierung ===
    return img.resize((size, size), Image.Resampling.LANCZOS)


def generate_qr_png(payload: str, colors: ColorConfig, size: int = 600) -> bytes:
    img = generate_qr_image(payload, colors, size)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_qr_svg(payload: str, colors: ColorConfig) -> bytes:
    """
    Vektor-Export. Unterstützt Vorder-/Hintergrundfarbe und Transparenz;
    Verläufe, Logos und Hintergrundbilder gibt es nur im Raster-Export.
    """
    qr = _make_qr(payload, colors)
    factory = type(
        "StyledSvgPathImage",
        (qrcode.image.svg.SvgPathImage,),
        {
            "QR_PATH_STYLE": {
                **qrcode.image.svg.SvgPathImage.QR_PATH_STYLE,
                "fill": colors.foreground,
            },
            "background": None if _is_transparent(colors) else colors.background,
        },
    )
    img = qr.make_image(image_factory=factory)
    buf = BytesIO()
    img.save(buf)
    svg = buf.getvalue()
    if b"shape-rendering" not in svg:
        svg = svg.replace(b"<svg", b'<svg shape-rendering="crispEdges"', 1)
    return svg


def generate_qr_pdf(payload: str, colors: ColorConfig, generated_at: Optional[datetime] = None) -> bytes:
    """A4-Seite, QR-Code 100 mm breit, mittig, darunter das Erstellungsdatum."""
    page = Image.new("RGB", _A4_PX, "white")
    qr_px = int(100 * _PX_PER_MM)
    qr_img = generate_qr_image(payload, colors, qr_px)
    x = (_A4_PX[0] - qr_px) // 2
    y = int(50 * _PX_PER_MM)
    page.paste(qr_img, (x, y), mask=qr_img)

    draw = ImageDraw.Draw(page)
    try:
        font = ImageFont.truetype("arial.ttf", 36)
    except OSError:
        font = ImageFont.load_default()
    text = f"Generated: {(generated_at or datetime.now()).strftime('%b %d, %Y, %I:%M:%S %p')}"
    text_w = draw.textlength(text, font=font)
    draw.text(((_A4_PX[0] - text_w) // 2, int(170 * _PX_PER_MM)), text, fill="black", font=font)

    buf = BytesIO()
    page.save(buf, format="PDF", resolution=300.0)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# 🖨️ Renderer für Verlauf & Export
# ---------------------------------------------------------------------------
class PillowQRRenderer:
    """Standard-Renderer (qrcode + Pillow); CPU-Arbeit läuft in einem Worker-Thread."""

    default_resolution = 1024

    async def render_thumbnail(self, payload: str, colors: ColorConfig, size_px: int) -> str:
        png = await asyncio.to_thread(generate_qr_png, payload, colors, size_px)
        return bytes_to_data_url(png)

    async def render_export(
        self,
        payload: str,
        colors: ColorConfig,
        fmt: ExportFormat,
        resolution: Optional[int] = None,
    ) -> bytes:
        fmt = ExportFormat(fmt)
        if fmt == ExportFormat.PNG:
            return await asyncio.to_thread(generate_qr_png, payload, colors, resolution or self.default_resolution)
        if fmt == ExportFormat.SVG:
            return await asyncio.to_thread(generate_qr_svg, payload, colors)
        return await asyncio.to_thread(generate_qr_pdf, payload, colors)
