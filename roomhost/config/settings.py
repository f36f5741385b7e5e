"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres de l'hôte de salle (URL Firebase, lien de jeu,
  cadence de polling, durée du compte à rebours, logs…).
- Les valeurs par défaut conviennent pour un émulateur Firebase local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from roomhost.config.settings import settings`.

Exemples de `.env`
------------------
APP_NAME="Room Host (Salon)"
DATABASE_URL="https://mon-projet-default-rtdb.firebaseio.com"
WEB_APP_URL="https://example.com/game/play"
ROOM_CODE="TEST"
POLL_INTERVAL=1.5
COUNTDOWN_DURATION=10
LOG_LEVEL="DEBUG"
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Room Host"

    # Base de la Realtime Database (sans le segment /rooms).
    # Par défaut: émulateur Firebase local (port 9000).
    DATABASE_URL: str = "http://127.0.0.1:9000"
    # Page web où les joueurs rejoignent la salle (?code=XXXX ajouté)
    WEB_APP_URL: str = "http://localhost:3000/play"

    # Code de salle forcé (vide → code aléatoire de 4 lettres)
    ROOM_CODE: str = ""
    # Texte "prompt" du document initial
    INITIAL_PROMPT: str = "Waiting for players..."

    # Cadence de polling du document (secondes)
    POLL_INTERVAL: float = 1.0
    # Compte à rebours "tout le monde est prêt" (secondes) et pas d'une frame
    COUNTDOWN_DURATION: float = 5.0
    COUNTDOWN_TICK: float = 0.1

    # Timeout requests (secondes). None = pas de timeout (requête bloquée = tick bloqué)
    HTTP_TIMEOUT: Optional[float] = None

    # Ouvre la salle au démarrage de l'app FastAPI
    HOST_AUTOSTART: bool = True

    LOG_LEVEL: str = "INFO"

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
