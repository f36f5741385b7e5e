"""
Models / room.py
Rôle:
- Définir la structure du document de salle tel que stocké dans la Realtime Database
  (`/rooms/{code}`), côté modèles Pydantic.

Champs (noms du fil JSON entre parenthèses):
- game_state (gameState): "lobby" | "in-game" | "post-game" (chaîne brute, cf. GameState.parse).
- prompt: texte affiché aux joueurs.
- players: dictionnaire {player_id: PlayerRecord}, clés attribuées par le store distant.
- chat_messages (chatMessages): dictionnaire {message_id: ChatRecord}, append-only.

Particularités Firebase:
- Un nœud absent ou `null` → dictionnaire vide.
- Un nœud dont les clés sont des petits entiers séquentiels revient sous forme de
  tableau JSON (avec des trous `null`) → re-normalisé en dictionnaire {"0": ..., "2": ...}.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_mapping(value: Any) -> Any:
    """Nœud Firebase → dict (None → {}, tableau → {index: item} sans les trous)."""
    if value is None:
        return {}
    if isinstance(value, list):
        return {str(i): item for i, item in enumerate(value) if item is not None}
    if isinstance(value, dict):
        return {k: v for k, v in value.items() if v is not None}
    return value


class GameState(str, Enum):
    """Machine d'état locale de la salle."""
    LOBBY = "lobby"
    IN_GAME = "in-game"
    POST_GAME = "post-game"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["GameState"]:
        """Chaîne du document → état, ou None si la valeur est inconnue."""
        try:
            return cls(raw)
        except ValueError:
            return None


class PlayerRecord(BaseModel):
    """Joueur tel qu'écrit par le client web (éphémère, possédé par le store distant)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    score: int = 0
    is_ready: bool = Field(default=False, alias="isReady")
    inputs: Dict[str, bool] = Field(default_factory=dict)  # direction -> pressé ?

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("score", "is_ready", mode="before")
    @classmethod
    def _none_scalar(cls, v: Any, info) -> Any:
        if v is None:
            return 0 if info.field_name == "score" else False
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def _inputs_mapping(cls, v: Any) -> Any:
        return _as_mapping(v)


class ChatRecord(BaseModel):
    """Message de chat (écrit une fois, jamais modifié)."""
    model_config = ConfigDict(extra="ignore")

    sender: str = ""
    message: str = ""

    @field_validator("sender", "message", mode="before")
    @classmethod
    def _none_text(cls, v: Any) -> Any:
        return "" if v is None else v


class RoomDocument(BaseModel):
    """Document complet `/rooms/{code}`."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    game_state: Optional[str] = Field(default=None, alias="gameState")
    prompt: str = ""
    players: Dict[str, PlayerRecord] = Field(default_factory=dict)
    chat_messages: Dict[str, ChatRecord] = Field(default_factory=dict, alias="chatMessages")

    @field_validator("players", "chat_messages", mode="before")
    @classmethod
    def _firebase_nodes(cls, v: Any) -> Any:
        return _as_mapping(v)

    @field_validator("prompt", mode="before")
    @classmethod
    def _none_prompt(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def state(self) -> Optional[GameState]:
        return GameState.parse(self.game_state)


def initial_room_payload(prompt: str = "Waiting for players...") -> Dict[str, Any]:
    """Payload écrit à la création de la salle (ordre des clés conservé sur le fil)."""
    return {"gameState": GameState.LOBBY.value, "prompt": prompt}
