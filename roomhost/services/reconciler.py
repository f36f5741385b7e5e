"""
Service: reconciler.py
Rôle:
- Comparer le document de salle fraîchement lu avec ce qui a déjà été rendu, et en déduire
  les opérations d'affichage minimales + les transitions de la machine d'état locale.

Passes (dans cet ordre, chacune linéaire en nombre de joueurs/messages):
1) transition d'état (lobby / in-game / post-game) ; en lobby → vérification "tous prêts"
2) diff des joueurs : suppression / ajout / rafraîchissement du libellé
3) diff du chat : append-only, un message affiché ne disparaît jamais
4) en partie : journalisation des entrées (haut/bas/gauche/droite) de chaque joueur

Miroir local (jamais renvoyé au store distant):
- player_rows: {player_id: handle d'affichage}
- displayed_message_ids: ids de messages déjà affichés
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set

from roomhost.models.room import GameState, PlayerRecord, RoomDocument
from roomhost.services.countdown import ReadyCountdown
from roomhost.services.presentation import Presenter

logger = logging.getLogger(__name__)

# Panneau affiché pour chaque état (les autres sont masqués à l'entrée dans l'état)
PANELS: Dict[GameState, str] = {
    GameState.LOBBY: "lobby",
    GameState.IN_GAME: "game",
    GameState.POST_GAME: "results",
}
INPUT_DIRECTIONS = ("up", "down", "left", "right")


class RoomReconciler:
    def __init__(self, presenter: Presenter, countdown: ReadyCountdown) -> None:
        self.presenter = presenter
        self.countdown = countdown
        self.current_state: GameState = GameState.LOBBY
        self.player_rows: Dict[str, Any] = {}
        self.displayed_message_ids: Set[str] = set()

    async def apply(self, document: Optional[RoomDocument]) -> None:
        """Applique un document ; None (salle absente / illisible) → no-op."""
        if document is None:
            logger.info("Room data is null")
            return

        await self._apply_game_state(document)
        await self._sync_players(document.players)
        await self._sync_chat(document)
        if self.current_state == GameState.IN_GAME:
            self._log_inputs(document.players)

    # ---------------- 1) machine d'état ----------------
    async def _apply_game_state(self, document: RoomDocument) -> None:
        new_state = document.state
        if new_state is None:
            logger.warning("Invalid game state %r, ignored", document.game_state)
            return

        if new_state != self.current_state:
            logger.info("Entered %s state", new_state.value)
            await self.enter_panels(new_state)
        self.current_state = new_state

        if new_state == GameState.LOBBY:
            await self.countdown.check_ready(document.players)

    async def enter_panels(self, state: GameState) -> None:
        """Affiche le panneau de `state` et masque les autres."""
        shown = PANELS[state]
        for panel in PANELS.values():
            if panel != shown:
                await self.presenter.hide_panel(panel)
        await self.presenter.show_panel(shown)

    # ---------------- 2) joueurs ----------------
    async def _sync_players(self, players: Dict[str, PlayerRecord]) -> None:
        for player_id in list(self.player_rows):
            if player_id not in players:
                handle = self.player_rows.pop(player_id)
                await self.presenter.destroy_player_row(handle)
                logger.debug("Player %s left", player_id)

        for player_id, player in players.items():
            if player_id not in self.player_rows:
                self.player_rows[player_id] = await self.presenter.create_player_row(player.name)
                logger.debug("Player %s joined as %r", player_id, player.name)
            else:
                await self.presenter.update_player_row(self.player_rows[player_id], player.name)

    # ---------------- 3) chat ----------------
    async def _sync_chat(self, document: RoomDocument) -> None:
        for message_id, chat in document.chat_messages.items():
            if message_id in self.displayed_message_ids:
                continue
            await self.presenter.append_chat_line(chat.sender, chat.message)
            self.displayed_message_ids.add(message_id)

    # ---------------- 4) entrées ----------------
    def _log_inputs(self, players: Dict[str, PlayerRecord]) -> None:
        for player in players.values():
            if not player.inputs:
                continue
            flags = {d: bool(player.inputs.get(d, False)) for d in INPUT_DIRECTIONS}
            logger.debug(
                "Player %s Inputs - Up: %s, Down: %s, Left: %s, Right: %s",
                player.name, flags["up"], flags["down"], flags["left"], flags["right"],
            )

    def status(self) -> Dict[str, Any]:
        """Snapshot synthétique pour /room."""
        return {
            "game_state": self.current_state.value,
            "countdown_running": self.countdown.running,
            "player_ids": sorted(self.player_rows),
            "displayed_messages": len(self.displayed_message_ids),
        }
