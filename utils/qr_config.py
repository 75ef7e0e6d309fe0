"""
utils/qr_config.py
────────────────────────────────────────────
Globale Konfiguration für Payload-Erzeugung,
Verlauf und Auto-Save sowie die Farb-Presets
für gerenderte QR-Codes.

Werte können über Umgebungsvariablen (.env)
überschrieben werden.
────────────────────────────────────────────
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv

from models.history import ColorConfig, GradientType

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


# ─────────────────────────────────────────────
# 🗂️ Verlauf
# ─────────────────────────────────────────────
HISTORY_STORAGE_KEY: str = os.getenv("HISTORY_STORAGE_KEY", "qr_generator_history")
HISTORY_MAX_ITEMS: int = _env_int("HISTORY_MAX_ITEMS", 50)
HISTORY_MAX_STORAGE_SIZE: int = _env_int("HISTORY_MAX_STORAGE_SIZE", 5 * 1024 * 1024)
THUMBNAIL_SIZE: int = _env_int("THUMBNAIL_SIZE", 100)

# ─────────────────────────────────────────────
# ⏱️ Auto-Save
# ─────────────────────────────────────────────
AUTOSAVE_DELAY_SECONDS: float = _env_float("AUTOSAVE_DELAY_SECONDS", 5.0)

# ─────────────────────────────────────────────
# 🖼️ Rendering
# ─────────────────────────────────────────────
LOGO_SIZE_RATIO: float = 0.25

# ─────────────────────────────────────────────
# 🎨 STANDARDFARBEN (Basis)
# ─────────────────────────────────────────────
DEFAULT_COLORS: Dict[str, Any] = {
    "foreground": "#000000",
    "background": "#FFFFFF",
}

# ─────────────────────────────────────────────
# 🪄 PRESETS – Farbvarianten
# ─────────────────────────────────────────────
QR_COLOR_PRESETS: Dict[str, Dict[str, Any]] = {
    "classic": {
        "foreground": "#000000",
        "background": "#FFFFFF",
    },
    "modern": {
        "foreground": "#0D2A78",
        "background": "#FFFFFF",
        "gradient_enabled": True,
        "gradient_secondary_color": "#F472B6",
        "gradient_type": GradientType.LINEAR,
        "gradient_rotation": 45,
    },
    "dots": {
        "foreground": "#2563EB",
        "background": "#E0E7FF",
    },
    "soft": {
        "foreground": "#4F46E5",
        "background": "#EEF2FF",
    },
    "premium": {
        "foreground": "#D4AF37",
        "background": "#FFFBEA",
    },
    "neon": {
        "foreground": "#06B6D4",
        "background": "#0F172A",
        "gradient_enabled": True,
        "gradient_secondary_color": "#67E8F9",
        "gradient_type": GradientType.RADIAL,
    },
    "dark": {
        "foreground": "#FFFFFF",
        "background": "#0D0D0D",
    },
    "sunset": {
        "foreground": "#FB7185",
        "background": "#FFF7ED",
        "gradient_enabled": True,
        "gradient_secondary_color": "#F59E0B",
        "gradient_type": GradientType.LINEAR,
        "gradient_rotation": 90,
    },
    "ocean": {
        "foreground": "#0EA5E9",
        "background": "#E0F2FE",
        "gradient_enabled": True,
        "gradient_secondary_color": "#22D3EE",
        "gradient_type": GradientType.RADIAL,
    },
    "forest": {
        "foreground": "#15803D",
        "background": "#ECFDF5",
    },
    "transparent": {
        "foreground": "#000000",
        "background": "#FFFFFF",
        "transparent_background": True,
    },
}


# ─────────────────────────────────────────────
# 🧠 FUNKTION: Preset abrufen
# ─────────────────────────────────────────────
def get_color_preset(name: str = "classic") -> ColorConfig:
    """
    Gibt das gewünschte Farb-Preset als ColorConfig zurück.
    Unbekannte Namen fallen auf die Standardfarben zurück.
    """
    preset = QR_COLOR_PRESETS.get(name, {})
    return ColorConfig(**{**DEFAULT_COLORS, **preset})
