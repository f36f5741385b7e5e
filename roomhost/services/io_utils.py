"""
Utilitaires JSON (rapides) basés sur orjson, pour les corps HTTP de la Realtime Database.
- encode_json(data) → bytes compacts (ordre des clés conservé)
- decode_json(raw)  → Any (bytes ou str), lève orjson.JSONDecodeError si invalide

Attention:
- orjson renvoie/attend des bytes; `encode_json("in-game")` donne b'"in-game"'
  (une chaîne JSON, guillemets compris), ce qu'attend un PUT sur un champ scalaire.
"""
from typing import Any, Union

import orjson as json

JSONDecodeError = json.JSONDecodeError


def encode_json(data: Any) -> bytes:
    """Sérialise en JSON compact (pas d'indentation, pas d'espaces)."""
    return json.dumps(data)


def decode_json(raw: Union[bytes, str]) -> Any:
    """Désérialise un corps de réponse JSON."""
    return json.loads(raw)
