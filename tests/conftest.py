from __future__ import annotations

import asyncio
from typing import Any, List, Tuple

import pytest

from roomhost.services.firebase_client import RoomServiceError
from roomhost.services.presentation import Presenter


class RecordingPresenter(Presenter):
    """Presenter de test : journalise chaque appel dans `calls` (journal partageable)."""

    def __init__(self, journal: List[Tuple] | None = None) -> None:
        self.calls: List[Tuple] = journal if journal is not None else []
        self.rows: dict[str, str] = {}
        self._next_handle = 0

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    def countdown_texts(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "countdown"]

    async def create_player_row(self, name: str) -> str:
        self._next_handle += 1
        handle = f"row-{self._next_handle}"
        self.rows[handle] = name
        self.calls.append(("create", name))
        return handle

    async def update_player_row(self, handle: str, name: str) -> None:
        self.rows[handle] = name
        self.calls.append(("update", handle, name))

    async def destroy_player_row(self, handle: str) -> None:
        self.rows.pop(handle, None)
        self.calls.append(("destroy", handle))

    async def append_chat_line(self, sender: str, message: str) -> None:
        self.calls.append(("chat", sender, message))

    async def show_panel(self, name: str) -> None:
        self.calls.append(("show", name))

    async def hide_panel(self, name: str) -> None:
        self.calls.append(("hide", name))

    async def set_countdown_text(self, text: str) -> None:
        self.calls.append(("countdown", text))

    async def render_join_code(self, text: str) -> None:
        self.calls.append(("join_code", text))

    async def render_join_image(self, payload: str) -> None:
        self.calls.append(("join_image", payload))


class FakeRoomClient:
    """Remplace FirebaseRoomClient : documents scriptés, échecs à la demande."""

    def __init__(self, documents: list[Any] | None = None, journal: List[Tuple] | None = None) -> None:
        self.calls: List[Tuple] = journal if journal is not None else []
        self.documents = list(documents or [])
        self.fail_create = False
        self.fail_write = False

    def create_room(self, code: str, initial_payload: dict) -> None:
        self.calls.append(("create_room", code, initial_payload))
        if self.fail_create:
            raise RoomServiceError("create failed")

    def fetch_room(self, code: str):
        self.calls.append(("fetch_room", code))
        item = self.documents.pop(0) if self.documents else None
        if isinstance(item, Exception):
            raise item
        return item

    def write_field(self, code: str, path: str, value: Any) -> None:
        self.calls.append(("write_field", code, path, value))
        if self.fail_write:
            raise RoomServiceError("write failed")

    def delete_room(self, code: str) -> None:
        self.calls.append(("delete_room", code))

    def ops(self, name: str) -> list[Tuple]:
        return [call for call in self.calls if call[0] == name]


async def instant_sleep(_seconds: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def journal():
    """Journal commun presenter + client (ordre global des appels)."""
    return []


@pytest.fixture
def presenter(journal):
    return RecordingPresenter(journal)


@pytest.fixture
def fake_client(journal):
    return FakeRoomClient(journal=journal)


@pytest.fixture
def fast_sleep():
    return instant_sleep
