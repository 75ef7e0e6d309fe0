# =============================================================================
# 📦 models/history.py – Farbkonfiguration, Verlaufseinträge & Speicher-Schema
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.records import CamelModel, QRRecord

STORAGE_VERSION = 1


class GradientType(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"


class BackgroundImageConfig(CamelModel):
    image: str  # data URL
    opacity: float = 1.0


class LogoConfig(CamelModel):
    image: str  # data URL
    stroke_width: int = 0
    stroke_color: str = "#FFFFFF"


class ColorConfig(CamelModel):
    """Reine Stilkonfiguration – wird unverändert im Verlauf mitgespeichert."""

    foreground: str = "#000000"
    background: str = "#FFFFFF"
    transparent_background: Optional[bool] = None
    gradient_enabled: Optional[bool] = None
    gradient_secondary_color: Optional[str] = None
    gradient_type: Optional[GradientType] = None
    gradient_rotation: Optional[float] = None
    background_image: Optional[BackgroundImageConfig] = None
    logo: Optional[LogoConfig] = None


class HistoryItem(CamelModel):
    id: str
    timestamp: int  # ms seit Epoch
    type: str
    data: QRRecord
    colors: ColorConfig
    thumbnail: str = ""


class StorageSchema(CamelModel):
    version: int = STORAGE_VERSION
    items: List[HistoryItem] = Field(default_factory=list)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    def size_bytes(self) -> int:
        return len(self.to_json().encode("utf-8"))


def empty_schema() -> StorageSchema:
    return StorageSchema(version=STORAGE_VERSION, items=[])
