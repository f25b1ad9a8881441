from __future__ import annotations

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from workinfo.services.theme_service import ThemeState, load_theme, save_theme

router = APIRouter(prefix="/theme", tags=["theme"])


def _respond(state: ThemeState) -> JSONResponse:
    response = JSONResponse(state.as_dict())
    save_theme(response, state)
    return response


@router.get("")
def get_theme(state: ThemeState = Depends(load_theme)):
    return _respond(state)


@router.post("")
def set_theme(payload: dict = Body(...), state: ThemeState = Depends(load_theme)):
    state.set_theme(payload.get("mode"))
    return _respond(state)


@router.post("/toggle")
def toggle_theme(state: ThemeState = Depends(load_theme)):
    state.toggle()
    return _respond(state)


@router.post("/colors")
def set_colors(payload: dict = Body(...), state: ThemeState = Depends(load_theme)):
    state.set_custom_colors(payload)
    return _respond(state)


@router.post("/reset")
def reset_colors(state: ThemeState = Depends(load_theme)):
    state.reset_colors()
    return _respond(state)


@router.get("/card-colors")
def card_colors(state: ThemeState = Depends(load_theme)):
    return state.colors_for_card()
