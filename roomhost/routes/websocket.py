# roomhost/routes/websocket.py
"""
WebSocket endpoints.

- /ws/display : canal des écrans de salle. À la connexion, envoie la scène courante
  ({"type":"scene","payload":...}), puis chaque opération d'affichage est diffusée
  par le WebSocketPresenter. Ping/pong pour heartbeat.
"""
from __future__ import annotations

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from roomhost.services.presentation import WebSocketPresenter
from roomhost.services.room_host import HOST
from roomhost.services.ws_manager import WS

router = APIRouter()


@router.websocket("/ws/display")
async def display_endpoint(ws: WebSocket):
    await WS.connect(ws)
    try:
        presenter = HOST.presenter
        if isinstance(presenter, WebSocketPresenter):
            await WS.send_json(ws, {"type": "scene", "payload": presenter.scene.snapshot()})
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except Exception:
                # Message non JSON -> ignore
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                await WS.send_json(ws, {"type": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await WS.disconnect(ws)
