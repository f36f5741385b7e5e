"""
Module routes/health.py
Rôle:
- Endpoint de santé (service OK + salle ouverte / polling actif).
"""
from fastapi import APIRouter

from roomhost.config.settings import settings
from roomhost.services.room_host import HOST

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health():
    """Renvoie un OK minimal avec le nom de service et l'état de la salle."""
    return {
        "ok": True,
        "service": settings.APP_NAME,
        "room_code": HOST.room_code or None,
        "polling": HOST.polling,
    }
