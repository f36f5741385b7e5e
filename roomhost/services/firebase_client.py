"""
Service: firebase_client.py
- Client HTTP (REST) de la Firebase Realtime Database pour un document de salle.
- Gabarit d'URL: {base}/rooms/{code}.json et {base}/rooms/{code}/{path}.json

Opérations:
- create_room(code, payload): PUT du document initial.
- fetch_room(code): GET → RoomDocument, ou None si `null` / corps illisible.
- write_field(code, path, value): PUT d'un champ (scalaire ou objet JSON).
- delete_room(code): DELETE du document.

Pas d'authentification, pas de retry, pas de backoff : un échec est journalisé puis
remonté en RoomServiceError, l'appelant décide (le plus souvent : log + on passe).
"""
import logging
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from roomhost.models.room import RoomDocument
from roomhost.services.io_utils import JSONDecodeError, decode_json, encode_json

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class RoomServiceError(RuntimeError):
    """Erreur encapsulant un échec de communication avec la Realtime Database."""


class FirebaseRoomClient:
    """
    Client HTTP centralisé pour les documents `/rooms/{code}`.
    - Corps JSON compacts (orjson), aucun en-tête d'auth.
    - Journalise chaque requête avec l'URL et le code de salle.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def room_url(self, code: str, path: Optional[str] = None) -> str:
        if path:
            return f"{self.base_url}/rooms/{code}/{path.strip('/')}.json"
        return f"{self.base_url}/rooms/{code}.json"

    def _request(
        self,
        method: str,
        url: str,
        *,
        code: str,
        payload: Any = None,
        has_payload: bool = False,
    ) -> requests.Response:
        data = encode_json(payload) if has_payload else None
        try:
            logger.debug(
                "Room request start",
                extra={"room_url": url, "room_code": code, "room_method": method},
            )
            response = self.session.request(
                method,
                url,
                data=data,
                headers=JSON_HEADERS if has_payload else None,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response
        except requests.Timeout as exc:
            logger.warning(
                "Room request timeout",
                extra={"room_url": url, "room_code": code, "room_method": method},
            )
            raise RoomServiceError(f"{method} {url} timed out") from exc
        except requests.RequestException as exc:
            logger.error(
                "Room request failed: %s",
                exc,
                extra={"room_url": url, "room_code": code, "room_method": method},
            )
            raise RoomServiceError(f"{method} {url} failed") from exc

    def create_room(self, code: str, initial_payload: Dict[str, Any]) -> None:
        self._request("PUT", self.room_url(code), code=code, payload=initial_payload, has_payload=True)

    def fetch_room(self, code: str) -> Optional[RoomDocument]:
        url = self.room_url(code)
        response = self._request("GET", url, code=code)
        try:
            raw = decode_json(response.content)
        except JSONDecodeError:
            logger.warning("Invalid JSON payload for room", extra={"room_url": url, "room_code": code})
            return None
        if raw is None:
            return None
        if not isinstance(raw, dict):
            logger.warning(
                "Room payload is not an object (%s)",
                type(raw).__name__,
                extra={"room_url": url, "room_code": code},
            )
            return None
        try:
            return RoomDocument.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Room payload failed validation: %s",
                exc.errors()[:3],
                extra={"room_url": url, "room_code": code},
            )
            return None

    def write_field(self, code: str, path: str, value: Any) -> None:
        self._request("PUT", self.room_url(code, path), code=code, payload=value, has_payload=True)

    def delete_room(self, code: str) -> None:
        self._request("DELETE", self.room_url(code), code=code)
