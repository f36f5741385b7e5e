"""
Service: room_host.py
Rôle:
- Cycle de vie d'une salle hébergée sur la Realtime Database :
  création (PUT) → polling (GET toutes les `poll_interval` s) → suppression (DELETE).
- `RoomHost` : hôte générique, à spécialiser via des hooks :
    * initial_payload()          → document écrit à la création
    * on_room_created(code)      → appelé une fois la salle créée
    * process_document(document) → appelé à chaque poll réussi
    * send_json_data(path, value) → écrit une partie du document
- `LobbyRoomHost` : hôte "lobby" (liste joueurs, chat, panneaux, compte à rebours).

Concurrence:
- Une seule tâche de polling ; les appels HTTP (requests, bloquants) passent par
  anyio.to_thread, deux fetchs ne sont donc jamais en vol en même temps.
- Une tâche de compte à rebours (cf. countdown.py).
- La suppression à la fermeture part dans un thread daemon, sans attente.

Erreurs: tout est absorbé ici (log) ; rien ne remonte vers l'affichage.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Dict, Optional

import anyio

from roomhost.config.settings import settings
from roomhost.models.room import GameState, RoomDocument, initial_room_payload
from roomhost.services.countdown import ReadyCountdown
from roomhost.services.firebase_client import FirebaseRoomClient, RoomServiceError
from roomhost.services.presentation import Presenter, WebSocketPresenter
from roomhost.services.reconciler import RoomReconciler
from roomhost.services.room_code import resolve_room_code

logger = logging.getLogger(__name__)


class RoomHost:
    def __init__(
        self,
        client: FirebaseRoomClient,
        *,
        room_code: str = "",
        poll_interval: float = 1.0,
        web_app_url: str = "",
    ) -> None:
        self.client = client
        self.forced_room_code = room_code
        self.poll_interval = poll_interval
        self.web_app_url = web_app_url
        self.room_code: str = ""
        self._poll_task: Optional[asyncio.Task] = None

    # ---------------- hooks ----------------
    def initial_payload(self) -> Dict[str, Any]:
        return initial_room_payload()

    async def on_room_created(self, room_code: str) -> None:
        pass

    async def process_document(self, document: Optional[RoomDocument]) -> None:
        pass

    # ---------------- helpers ----------------
    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def join_link(self) -> str:
        """Lien de la page joueur avec le code pré-rempli (encodé en QR par l'écran)."""
        return f"{self.web_app_url}?code={self.room_code}"

    async def send_json_data(self, path: str, value: Any) -> bool:
        """PUT d'un champ du document ; échec journalisé, jamais relancé."""
        if not self.room_code:
            return False
        try:
            await anyio.to_thread.run_sync(self.client.write_field, self.room_code, path, value)
        except RoomServiceError:
            logger.error("Error setting json data %s=%r", path, value)
            return False
        logger.info("Json data set %s=%r", path, value)
        return True

    # ---------------- cycle ----------------
    async def start(self) -> bool:
        """Crée la salle puis lance la boucle de polling. False si la création échoue."""
        if self.room_code:
            return self.polling

        code = resolve_room_code(self.forced_room_code)
        try:
            await anyio.to_thread.run_sync(self.client.create_room, code, self.initial_payload())
        except RoomServiceError:
            logger.error("Error creating room %s", code)
            return False

        self.room_code = code
        logger.info("Room %s created successfully", code)
        await self.on_room_created(code)
        self._poll_task = asyncio.create_task(self._poll_loop())
        return True

    async def poll_once(self) -> bool:
        """Un tick : GET puis traitement. False si le tick est sauté."""
        try:
            document = await anyio.to_thread.run_sync(self.client.fetch_room, self.room_code)
        except RoomServiceError:
            logger.warning("Polling room %s failed, skipping tick", self.room_code)
            return False
        await self.process_document(document)
        return True

    async def _poll_loop(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval)

    def close(self) -> Optional[threading.Thread]:
        """Arrête le polling et supprime la salle (best-effort, non attendu)."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
        if not self.room_code:
            return None

        code, self.room_code = self.room_code, ""
        logger.info("Deleting room %s...", code)

        def _delete() -> None:
            try:
                self.client.delete_room(code)
            except RoomServiceError:
                logger.error("Error deleting room %s", code)

        thread = threading.Thread(target=_delete, name=f"delete-room-{code}", daemon=True)
        thread.start()
        return thread


class LobbyRoomHost(RoomHost):
    """Hôte lobby : réconciliation de l'affichage + compte à rebours "tous prêts"."""

    def __init__(
        self,
        client: FirebaseRoomClient,
        presenter: Presenter,
        *,
        prompt: str = "Waiting for players...",
        countdown_duration: float = 5.0,
        countdown_tick: float = 0.1,
        **kwargs: Any,
    ) -> None:
        super().__init__(client, **kwargs)
        self.presenter = presenter
        self.prompt = prompt
        self.countdown = ReadyCountdown(
            presenter,
            self._start_game,
            duration=countdown_duration,
            tick=countdown_tick,
        )
        self.reconciler = RoomReconciler(presenter, self.countdown)

    def initial_payload(self) -> Dict[str, Any]:
        return initial_room_payload(self.prompt)

    async def on_room_created(self, room_code: str) -> None:
        # l'écran démarre sur le lobby, état initial du réconciliateur
        await self.reconciler.enter_panels(self.reconciler.current_state)
        await self.presenter.render_join_code(room_code)
        await self.presenter.render_join_image(self.join_link())

    async def process_document(self, document: Optional[RoomDocument]) -> None:
        await self.reconciler.apply(document)

    async def _start_game(self) -> None:
        # pas de relance : le poll suivant montrera (ou non) "in-game"
        await self.send_json_data("gameState", GameState.IN_GAME.value)

    def close(self) -> Optional[threading.Thread]:
        self.countdown.cancel()
        return super().close()

    def status(self) -> Dict[str, Any]:
        snapshot = {
            "room_code": self.room_code,
            "join_link": self.join_link(),
            "polling": self.polling,
        }
        snapshot.update(self.reconciler.status())
        return snapshot


def build_host() -> LobbyRoomHost:
    """Hôte par défaut, câblé sur les settings et l'écran WebSocket."""
    return LobbyRoomHost(
        FirebaseRoomClient(settings.DATABASE_URL, timeout=settings.HTTP_TIMEOUT),
        WebSocketPresenter(),
        prompt=settings.INITIAL_PROMPT,
        countdown_duration=settings.COUNTDOWN_DURATION,
        countdown_tick=settings.COUNTDOWN_TICK,
        room_code=settings.ROOM_CODE,
        poll_interval=settings.POLL_INTERVAL,
        web_app_url=settings.WEB_APP_URL,
    )


HOST = build_host()
