"""
Service: room_code.py
- Génère un code de salle court, facile à taper (4 lettres majuscules).
- Pas de contrôle d'unicité côté store : une collision reste possible.
"""
import random
import string
from typing import Optional

ROOM_CODE_ALPHABET = string.ascii_uppercase
ROOM_CODE_LENGTH = 4


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """Tire `length` lettres uniformément dans A-Z."""
    return "".join(random.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def resolve_room_code(override: Optional[str] = None) -> str:
    """Code forcé (trim + majuscules) s'il est renseigné, sinon code aléatoire."""
    forced = (override or "").strip()
    if forced:
        return forced.upper()
    return generate_room_code()
