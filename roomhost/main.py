"""
Application FastAPI : point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour l'écran navigateur,
- Monte les routeurs (REST + WebSocket),
- Ouvre la salle au démarrage (si HOST_AUTOSTART) et la supprime à l'arrêt.

Lancement
---------
    uvicorn roomhost.main:app --port 8000
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roomhost.routes.health import router as health_router
from roomhost.routes.room import router as room_router
from roomhost.routes.websocket import router as ws_router

from roomhost.config.settings import settings
from roomhost.services.room_host import HOST
from roomhost.services.ws_manager import WS

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS (dev: permissif)
# ===========================
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(room_router)
app.include_router(ws_router)               # WebSocket endpoint (/ws/display)


@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne."""
    return {"ok": True, "service": "roomhost"}


@app.on_event("startup")
async def open_room():
    """Crée la salle distante et lance le polling."""
    logger.info("Database: %s", settings.DATABASE_URL)
    if settings.HOST_AUTOSTART:
        await HOST.start()


@app.on_event("shutdown")
async def close_room():
    """Supprime la salle (best-effort) et ferme les écrans."""
    HOST.close()
    await WS.close_all()
