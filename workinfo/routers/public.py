from __future__ import annotations

import io
import logging

import qrcode
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, Response, StreamingResponse

from workinfo.core.headers import build_csp
from workinfo.domain.analytics_providers import provider_connect_sources
from workinfo.routers._shared import templates
from workinfo.services.card_service import generate_vcard
from workinfo.services.page_head import PageHead
from workinfo.services.public_card_service import PublicCardService
from workinfo.services.theme_service import ThemeState, load_theme
from workinfo.services.tracking_script import inject_tracking_script, parse_tracking_script

router = APIRouter(prefix="", tags=["public"])
public_service = PublicCardService()
logger = logging.getLogger(__name__)


def _load_card(username: str) -> dict:
    card = public_service.fetch_public_card(username)
    if not card or not public_service.is_valid_public_card(card):
        raise HTTPException(404, "Card not found")
    return card


@router.get("/users/{username}", response_class=HTMLResponse)
def public_card(username: str, request: Request, theme: ThemeState = Depends(load_theme)):
    card = _load_card(username)
    # Card colors apply to this render only; the visitor's saved theme is untouched.
    theme.load_colors_from_card(card)
    head = PageHead()
    inject_tracking_script(card.get("tracking_script"), head)
    share = public_service.get_public_share_url(card["username"])
    context = {
        "card": card,
        "theme": theme,
        "head_scripts": head.render_scripts(),
        "image_url": public_service.get_public_image_url(card),
        "share_url": share,
        "vcard_url": f"/users/{card['username']}/vcard",
        "qr_url": f"/users/{card['username']}/qr.png",
    }
    response = templates(request).TemplateResponse(request, "public_card.html", context)
    connect = [source for resource in head.scripts for source in provider_connect_sources(resource.url)]
    response.headers["Content-Security-Policy"] = build_csp(head.script_origins(), connect)
    return response


@router.get("/users/{username}/vcard")
def public_vcard(username: str):
    card = _load_card(username)
    vcf = generate_vcard(card)
    filename = card["username"]
    return Response(
        vcf,
        media_type="text/vcard; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}.vcf"'},
    )


@router.get("/users/{username}/qr.png")
def public_qr(username: str):
    card = _load_card(username)
    img = qrcode.make(public_service.get_public_share_url(card["username"]))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return StreamingResponse(buf, media_type="image/png")


@router.get("/api/public/{username}")
def public_card_json(username: str):
    card = _load_card(username)
    data = {key: value for key, value in card.items() if key != "tracking_script"}
    parsed = parse_tracking_script(card.get("tracking_script"))
    data["tracking"] = (
        {"source": parsed.source, "attributes": dict(parsed.attributes), "provider": parsed.provider}
        if parsed
        else None
    )
    data["share_url"] = public_service.get_public_share_url(card["username"])
    return data
