from __future__ import annotations

import asyncio
import logging

import pytest

from roomhost.models.room import GameState, RoomDocument
from roomhost.services.countdown import ReadyCountdown
from roomhost.services.reconciler import RoomReconciler


def _doc(state: str = "lobby", players: dict | None = None, chat: dict | None = None) -> RoomDocument:
    return RoomDocument.model_validate({"gameState": state, "players": players, "chatMessages": chat})


def _player(name: str, ready: bool = False, **extra) -> dict:
    return {"name": name, "isReady": ready, **extra}


@pytest.fixture
def reconciler(presenter, fast_sleep):
    async def _noop():
        return None

    countdown = ReadyCountdown(presenter, _noop, duration=5.0, tick=0.1, sleep=fast_sleep)
    return RoomReconciler(presenter, countdown)


def test_same_document_twice_is_idempotent(reconciler, presenter):
    doc = _doc(players={"p1": _player("Alice"), "p2": _player("Bob")}, chat={"m1": {"sender": "Alice", "message": "yo"}})

    async def scenario():
        await reconciler.apply(doc)
        before = (presenter.count("create"), presenter.count("destroy"), presenter.count("chat"))
        await reconciler.apply(doc)
        after = (presenter.count("create"), presenter.count("destroy"), presenter.count("chat"))
        return before, after

    before, after = asyncio.run(scenario())
    assert before == (2, 0, 1)
    assert after == before
    assert presenter.count("update") == 2


def test_mirror_tracks_remote_player_keys(reconciler, presenter):
    async def scenario():
        await reconciler.apply(_doc(players={"p1": _player("Alice"), "p2": _player("Bob")}))
        await reconciler.apply(_doc(players={"p2": _player("Bobby"), "p3": _player("Chloé")}))

    asyncio.run(scenario())

    assert set(reconciler.player_rows) == {"p2", "p3"}
    assert presenter.count("destroy") == 1
    assert sorted(presenter.rows.values()) == ["Bobby", "Chloé"]


def test_players_node_disappearing_removes_everyone(reconciler, presenter):
    async def scenario():
        await reconciler.apply(_doc(players={"p1": _player("Alice")}))
        await reconciler.apply(_doc())

    asyncio.run(scenario())
    assert reconciler.player_rows == {}
    assert presenter.rows == {}


def test_chat_ids_only_accumulate(reconciler, presenter):
    snapshots = []

    async def scenario():
        for chat in (
            {"m1": {"sender": "A", "message": "un"}},
            {"m1": {"sender": "A", "message": "un"}, "m2": {"sender": "B", "message": "deux"}},
            {"m3": {"sender": "C", "message": "trois"}},
            None,
        ):
            await reconciler.apply(_doc(chat=chat))
            snapshots.append(set(reconciler.displayed_message_ids))

    asyncio.run(scenario())

    for earlier, later in zip(snapshots, snapshots[1:]):
        assert earlier <= later
    assert snapshots[-1] == {"m1", "m2", "m3"}
    assert [c[1:] for c in presenter.calls if c[0] == "chat"] == [("A", "un"), ("B", "deux"), ("C", "trois")]


def test_entering_in_game_toggles_panels_once_and_skips_ready_check(reconciler, presenter):
    async def scenario():
        await reconciler.apply(_doc("lobby"))
        await reconciler.apply(_doc("in-game", players={}))
        await reconciler.apply(_doc("in-game", players={}))

    asyncio.run(scenario())

    assert reconciler.current_state is GameState.IN_GAME
    assert presenter.count("show") == 1
    assert ("show", "game") in presenter.calls
    assert ("hide", "lobby") in presenter.calls
    assert presenter.calls.count(("hide", "lobby")) == 1
    # la vérification "tous prêts" n'a tourné qu'en lobby (1er document : libellé vidé)
    assert presenter.countdown_texts() == [""]


def test_post_game_shows_results_panel(reconciler, presenter):
    asyncio.run(reconciler.apply(_doc("post-game")))

    assert reconciler.current_state is GameState.POST_GAME
    assert ("show", "results") in presenter.calls
    assert ("hide", "lobby") in presenter.calls
    assert ("hide", "game") in presenter.calls


def test_unknown_state_is_ignored_but_lists_still_sync(reconciler, presenter, caplog):
    with caplog.at_level(logging.WARNING):
        asyncio.run(reconciler.apply(_doc("paused", players={"p1": _player("Alice")})))

    assert reconciler.current_state is GameState.LOBBY
    assert presenter.count("show") == 0
    assert presenter.count("create") == 1
    assert "Invalid game state" in caplog.text


def test_null_document_is_a_no_op(reconciler, presenter):
    asyncio.run(reconciler.apply(None))
    assert presenter.calls == []


def test_inputs_are_logged_in_game(reconciler, caplog):
    doc = _doc("in-game", players={
        "p1": _player("Alice", inputs={"up": True, "left": True}),
        "p2": _player("Bob"),
    })

    with caplog.at_level(logging.DEBUG, logger="roomhost.services.reconciler"):
        asyncio.run(reconciler.apply(doc))

    assert "Player Alice Inputs - Up: True, Down: False, Left: True, Right: False" in caplog.text
    assert "Player Bob Inputs" not in caplog.text


class _NoneHandlePresenter:
    """Presenter dont le handle opaque vaut None."""

    def __init__(self, wrapped):
        self.wrapped = wrapped

    def __getattr__(self, name):
        return getattr(self.wrapped, name)

    async def create_player_row(self, name):
        await self.wrapped.create_player_row(name)
        return None


def test_none_handles_still_count_as_rendered(presenter, fast_sleep):
    none_presenter = _NoneHandlePresenter(presenter)

    async def _noop():
        return None

    countdown = ReadyCountdown(none_presenter, _noop, sleep=fast_sleep)
    reconciler = RoomReconciler(none_presenter, countdown)
    doc = _doc(players={"p1": _player("Alice")})

    async def scenario():
        await reconciler.apply(doc)
        await reconciler.apply(doc)

    asyncio.run(scenario())
    assert presenter.count("create") == 1
    assert presenter.calls.count(("update", None, "Alice")) == 1


def test_stale_lobby_after_completion_restarts_countdown(presenter, fast_sleep):
    writes = []

    async def _start_game():
        writes.append("in-game")

    countdown = ReadyCountdown(presenter, _start_game, duration=0.5, tick=0.1, sleep=fast_sleep)
    reconciler = RoomReconciler(presenter, countdown)
    ready = _doc("lobby", players={"p1": _player("A", ready=True), "p2": _player("B", ready=True)})

    async def finish():
        while countdown.running:
            await asyncio.sleep(0)
        await asyncio.sleep(0)

    async def scenario():
        await reconciler.apply(ready)
        await finish()
        # poll encore "lobby" (écriture pas encore visible) : nouveau décompte complet
        await reconciler.apply(ready)
        restarted = countdown.running
        # passer en partie n'annule pas le décompte en cours
        await reconciler.apply(_doc("in-game", players={"p1": _player("A", ready=True)}))
        still_running = countdown.running
        await finish()
        return restarted, still_running

    restarted, still_running = asyncio.run(scenario())
    assert restarted is True
    assert still_running is True
    assert writes == ["in-game", "in-game"]
    assert presenter.countdown_texts().count("Starting!") == 2
