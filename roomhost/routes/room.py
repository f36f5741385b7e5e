"""
Module routes/room.py
Rôle:
- Lecture de l'état de la salle hébergée (diagnostic / écran de contrôle).

Endpoints:
- GET /room        : code, lien de connexion, état local, compte à rebours, joueurs miroirs.
- GET /room/scene  : snapshot de la scène rendue par l'écran WebSocket.
"""
from fastapi import APIRouter, HTTPException

from roomhost.services.presentation import WebSocketPresenter
from roomhost.services.room_host import HOST

router = APIRouter(prefix="/room", tags=["room"])


@router.get("")
async def room_status():
    if not HOST.room_code:
        raise HTTPException(status_code=404, detail="No room open")
    return HOST.status()


@router.get("/scene")
async def room_scene():
    presenter = HOST.presenter
    if not isinstance(presenter, WebSocketPresenter):
        raise HTTPException(status_code=404, detail="No display scene")
    return presenter.scene.snapshot()
