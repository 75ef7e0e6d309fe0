# routes/qr.py
# =============================================================================
# 🚀 QR-Payload & Export Routes
# =============================================================================

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from models.history import ColorConfig
from models.records import QRRecord, VCardRecord, dump_record
from routes.utils import get_renderer
from utils.logo_processor import apply_stroke_to_logo
from utils.mecard_encoder import decode_mecard
from utils.qr_config import QR_COLOR_PRESETS, get_color_preset
from utils.qr_export import export_qr_code
from utils.qr_generator import ExportFormat, QRRenderer
from utils.qr_payload import (
    QRValidationError,
    build_payload,
    error_correction_for,
    estimate_qr_capacity,
    format_payload,
    validate_record,
)
from utils.vcard_encoder import encode_vcard, vcard_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qr", tags=["QR Payload"])


class RecordIn(BaseModel):
    record: QRRecord
    colors: Optional[ColorConfig] = None


class ExportIn(BaseModel):
    record: QRRecord
    colors: ColorConfig = Field(default_factory=ColorConfig)
    format: ExportFormat = ExportFormat.PNG
    resolution: Optional[int] = None
    filename: str = "qr-code"


class MeCardIn(BaseModel):
    payload: str


class LogoStrokeIn(BaseModel):
    image: str  # data URL
    stroke_width: int = Field(0, ge=0, alias="strokeWidth")
    stroke_color: str = Field("#FFFFFF", alias="strokeColor")

    model_config = ConfigDict(populate_by_name=True)


def _require_valid(record) -> None:
    result = validate_record(record)
    if not result.valid:
        raise HTTPException(status_code=422, detail=result.error)


@router.post("/validate")
def validate(body: RecordIn):
    return validate_record(body.record).to_dict()


@router.post("/payload")
def payload(body: RecordIn):
    """Validiert den Datensatz und gibt den QR-Payload zurück."""
    try:
        text = build_payload(body.record)
    except QRValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason) from exc

    level = error_correction_for(body.colors)
    return {
        "type": body.record.type,
        "payload": text,
        "length": len(text),
        "errorCorrection": level,
        "capacity": estimate_qr_capacity(level),
    }


@router.post("/export")
async def export(body: ExportIn, renderer: QRRenderer = Depends(get_renderer)) -> Response:
    _require_valid(body.record)
    try:
        result = await export_qr_code(
            renderer,
            format_payload(body.record),
            body.colors,
            body.format,
            base_filename=body.filename,
            resolution=body.resolution,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.error(f"❌ Export fehlgeschlagen: {exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post("/vcard.vcf")
def download_vcard(record: VCardRecord = Body(...)) -> Response:
    """vCard als .vcf-Datei."""
    _require_valid(record)
    return Response(
        content=encode_vcard(record),
        media_type="text/vcard",
        headers={"Content-Disposition": f'attachment; filename="{vcard_filename(record)}"'},
    )


@router.post("/decode/mecard")
def decode(body: MeCardIn):
    try:
        record = decode_mecard(body.payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return dump_record(record)


@router.get("/presets")
def presets():
    return {
        name: get_color_preset(name).model_dump(mode="json", by_alias=True, exclude_none=True)
        for name in QR_COLOR_PRESETS
    }


@router.post("/logo/stroke")
def logo_stroke(body: LogoStrokeIn):
    """Logo mit abgerundetem Rahmen hinterlegen, Ergebnis als PNG-Data-URL."""
    try:
        image = apply_stroke_to_logo(body.image, body.stroke_width, body.stroke_color)
    except (OSError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"Invalid logo image: {exc}") from exc
    return {"image": image}
