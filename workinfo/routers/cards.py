from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from workinfo.core import csrf
from workinfo.core.guards import require_user
from workinfo.services.card_service import (
    CardService,
    CardValidationError,
    InvalidImageError,
    card_to_dict,
)
from workinfo.services.session_service import SessionContext
from workinfo.services.tracking_script import validate_tracking_script

router = APIRouter(prefix="/api/card", tags=["cards"])
card_service = CardService()
logger = logging.getLogger(__name__)


@router.get("")
def get_card(ctx: SessionContext = Depends(require_user)):
    card = card_service.get_user_card(ctx.user_id)
    return {"card": card_to_dict(card) if card else None}


@router.put("", dependencies=[Depends(csrf.require_csrf_header)])
def save_card(payload: dict = Body(...), ctx: SessionContext = Depends(require_user)):
    try:
        card = card_service.save_card(ctx.user, payload)
    except CardValidationError as exc:
        return JSONResponse({"errors": exc.errors}, status_code=422)
    return {"card": card_to_dict(card)}


@router.delete("", dependencies=[Depends(csrf.require_csrf_header)])
def delete_card(ctx: SessionContext = Depends(require_user)):
    return {"deleted": card_service.delete_card(ctx.user)}


@router.post("/image", dependencies=[Depends(csrf.require_csrf_header)])
async def upload_image(file: UploadFile = File(...), ctx: SessionContext = Depends(require_user)):
    data = await file.read()
    try:
        url = card_service.upload_profile_image(ctx.user, data, file.content_type or "")
    except InvalidImageError as exc:
        raise HTTPException(400, str(exc)) from exc
    return {"url": url}


@router.post("/tracking-script/validate")
def validate_script(payload: dict = Body(...), ctx: SessionContext = Depends(require_user)):
    raw = payload.get("tracking_script")
    if raw is not None and not isinstance(raw, str):
        raise HTTPException(400, "tracking_script must be a string")
    return validate_tracking_script(raw).as_dict()


@router.post("/validate")
def validate_card(payload: dict = Body(...), ctx: SessionContext = Depends(require_user)):
    result = card_service.validate_card(payload)
    return {"is_valid": result.is_valid, "errors": result.errors}


@router.get("/share")
def share_links(ctx: SessionContext = Depends(require_user)):
    username = ctx.user.username
    share = card_service.get_card_share_url(username)
    return {"share_url": share, "vcard_url": f"{share}/vcard", "qr_url": f"{share}/qr.png"}
