"""
Service: presentation.py
Rôle:
- Interface étroite entre le moteur de synchronisation et l'affichage.
- `Presenter` : contrat (coroutines) consommé par le réconciliateur et le compte à rebours.
- `WebSocketPresenter` : implémentation "écran navigateur" ; garde une scène en mémoire
  (lignes joueurs, chat, panneaux, libellé du compte à rebours, code/lien de connexion)
  et diffuse chaque opération en WS sous la forme {"type": <op>, "payload": {...}}.

Les handles de lignes joueurs sont opaques pour le cœur : ici un identifiant hex.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from roomhost.services.ws_manager import WS, WSManager


class Presenter:
    """Contrat d'affichage. Toutes les méthodes sont des coroutines."""

    async def create_player_row(self, name: str) -> Any:
        raise NotImplementedError

    async def update_player_row(self, handle: Any, name: str) -> None:
        raise NotImplementedError

    async def destroy_player_row(self, handle: Any) -> None:
        raise NotImplementedError

    async def append_chat_line(self, sender: str, message: str) -> None:
        raise NotImplementedError

    async def show_panel(self, name: str) -> None:
        raise NotImplementedError

    async def hide_panel(self, name: str) -> None:
        raise NotImplementedError

    async def set_countdown_text(self, text: str) -> None:
        raise NotImplementedError

    async def render_join_code(self, text: str) -> None:
        raise NotImplementedError

    async def render_join_image(self, payload: str) -> None:
        raise NotImplementedError


@dataclass
class DisplayScene:
    """Copie en mémoire de ce qui a été rendu (sert de snapshot aux nouveaux écrans)."""
    rows: Dict[str, str] = field(default_factory=dict)  # handle -> libellé (ordre d'insertion)
    chat: List[Dict[str, str]] = field(default_factory=list)
    panels: Dict[str, bool] = field(default_factory=dict)
    countdown_text: str = ""
    join_code: Optional[str] = None
    join_link: Optional[str] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "rows": [{"handle": h, "name": n} for h, n in self.rows.items()],
            "chat": list(self.chat),
            "panels": dict(self.panels),
            "countdown_text": self.countdown_text,
            "join_code": self.join_code,
            "join_link": self.join_link,
        }


class WebSocketPresenter(Presenter):
    def __init__(self, hub: WSManager = WS) -> None:
        self.hub = hub
        self.scene = DisplayScene()

    async def create_player_row(self, name: str) -> str:
        handle = uuid4().hex[:12]
        self.scene.rows[handle] = name
        await self.hub.broadcast_type("player_row_created", {"handle": handle, "name": name})
        return handle

    async def update_player_row(self, handle: str, name: str) -> None:
        if self.scene.rows.get(handle) == name:
            # rafraîchissement idempotent : rien à pousser aux écrans
            return
        self.scene.rows[handle] = name
        await self.hub.broadcast_type("player_row_updated", {"handle": handle, "name": name})

    async def destroy_player_row(self, handle: str) -> None:
        self.scene.rows.pop(handle, None)
        await self.hub.broadcast_type("player_row_destroyed", {"handle": handle})

    async def append_chat_line(self, sender: str, message: str) -> None:
        line = {"sender": sender, "message": message, "text": f"{sender}: {message}"}
        self.scene.chat.append(line)
        await self.hub.broadcast_type("chat_line", line)

    async def show_panel(self, name: str) -> None:
        self.scene.panels[name] = True
        await self.hub.broadcast_type("panel", {"name": name, "visible": True})

    async def hide_panel(self, name: str) -> None:
        self.scene.panels[name] = False
        await self.hub.broadcast_type("panel", {"name": name, "visible": False})

    async def set_countdown_text(self, text: str) -> None:
        if self.scene.countdown_text == text:
            return
        self.scene.countdown_text = text
        await self.hub.broadcast_type("countdown", {"text": text})

    async def render_join_code(self, text: str) -> None:
        self.scene.join_code = text
        await self.hub.broadcast_type("join_code", {"code": text})

    async def render_join_image(self, payload: str) -> None:
        # l'écran encode le lien en QR code
        self.scene.join_link = payload
        await self.hub.broadcast_type("join_image", {"payload": payload})
