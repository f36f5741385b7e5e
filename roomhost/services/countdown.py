"""
Service: countdown.py
Rôle:
- Compte à rebours "la partie commence dans N secondes" piloté par les drapeaux isReady.

États:
- Idle     : aucune tâche de décompte.
- Counting : une tâche asyncio décrémente le temps restant d'un pas (`tick`) par frame
             et met à jour le libellé ; à zéro → "Starting!", retour Idle, puis on_complete().

Transitions (check_ready):
- joueurs non vides, tous prêts, Idle      → Counting (toujours depuis la durée complète)
- un joueur pas prêt pendant Counting      → Idle (tâche annulée, libellé vidé)
- plus aucun joueur                        → Idle (idem)
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, Mapping, Optional

from roomhost.models.room import PlayerRecord
from roomhost.services.presentation import Presenter

logger = logging.getLogger(__name__)

STARTING_TEXT = "Starting!"


def countdown_text(remaining: float) -> str:
    return f"Game starting in {math.ceil(remaining)}..."


class ReadyCountdown:
    def __init__(
        self,
        presenter: Presenter,
        on_complete: Callable[[], Awaitable[None]],
        *,
        duration: float = 5.0,
        tick: float = 0.1,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.presenter = presenter
        self.on_complete = on_complete
        self.duration = duration
        self.tick = tick
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_ready(self, players: Mapping[str, PlayerRecord]) -> None:
        """Évalue les drapeaux isReady et démarre/annule le décompte."""
        if not players:
            await self.stop()
            return

        all_ready = all(p.is_ready for p in players.values())
        if all_ready and not self.running:
            self.start()
        elif not all_ready and self.running:
            await self.stop()

    def start(self) -> None:
        """Démarre un décompte depuis la durée complète (pas de reprise)."""
        if self.running:
            return
        logger.info("All players ready, countdown started (%.1fs)", self.duration)
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        # pas entiers : 5.0 / 0.1 → 50 pas, pas de pas fantôme dû aux flottants
        steps = max(0, round(self.duration / self.tick))
        for step in range(steps):
            remaining = self.duration - step * self.tick
            await self.presenter.set_countdown_text(countdown_text(remaining))
            await self._sleep(self.tick)

        await self.presenter.set_countdown_text(STARTING_TEXT)
        # retour Idle avant l'écriture : un stop() ultérieur n'annule pas l'écriture
        self._task = None
        logger.info("Countdown finished")
        await self.on_complete()

    async def stop(self) -> None:
        """Annule un décompte en cours si nécessaire et vide le libellé."""
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Countdown cancelled")
        await self.presenter.set_countdown_text("")

    def cancel(self) -> None:
        """Annulation synchrone (fermeture de l'hôte), sans toucher à l'affichage."""
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
