# roomhost/services/ws_manager.py
"""
Service: ws_manager.py
- Registre des sockets "écran" (navigateur qui affiche la salle : liste joueurs,
  chat, panneaux, compte à rebours, QR de connexion).
- Snapshots immuables pour éviter "set changed size during iteration".
- Un envoi raté retire le socket mort du registre.
- Admin: stats(), close_all().
"""
from __future__ import annotations
from typing import Any, Set
from dataclasses import dataclass, field
from threading import RLock
import json
from starlette.websockets import WebSocket


@dataclass
class WSManager:
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    displays: Set[WebSocket] = field(default_factory=set)

    async def connect(self, ws: WebSocket) -> None:
        """Accepte la connexion WS et l'enregistre comme écran."""
        await ws.accept()
        with self._lock:
            self.displays.add(ws)

    def _unlink(self, ws: WebSocket) -> None:
        with self._lock:
            self.displays.discard(ws)

    async def disconnect(self, ws: WebSocket) -> None:
        """Ferme proprement la connexion et nettoie le registre."""
        self._unlink(ws)
        try:
            await ws.close()
        except Exception:
            pass

    async def _send_json_one(self, ws: WebSocket, payload: Any) -> bool:
        """Envoie à un WS; renvoie True si succès, sinon False (et retire le WS mort)."""
        try:
            data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
            await ws.send_text(data)
            return True
        except Exception:
            self._unlink(ws)
            return False

    async def send_json(self, ws: WebSocket, payload: Any) -> bool:
        return await self._send_json_one(ws, payload)

    def _snapshot(self) -> list[WebSocket]:
        with self._lock:
            return list(self.displays)

    async def broadcast(self, payload: Any) -> int:
        conns = self._snapshot()
        success = 0
        for ws in conns:
            if await self._send_json_one(ws, payload):
                success += 1
        return success

    async def broadcast_type(self, event_type: str, payload: Any) -> int:
        return await self.broadcast({"type": event_type, "payload": payload})

    def stats(self) -> dict:
        with self._lock:
            return {"displays_total": len(self.displays)}

    async def close_all(self) -> dict:
        """Ferme TOUS les écrans connectés."""
        for ws in self._snapshot():
            await self.disconnect(ws)
        return self.stats()


WS = WSManager()
