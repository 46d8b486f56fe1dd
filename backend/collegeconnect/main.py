"""
Point d'entrée principal de l'API CollegeConnect.
Démarrage : uvicorn collegeconnect.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import collegeconnect.models  # noqa: F401 — enregistre tous les modèles dans Base.metadata avant les routers
from collegeconnect.config import settings
from collegeconnect.database import create_tables
from collegeconnect.routers import attendance, auth, users
from collegeconnect.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : tables en développement, scheduler APScheduler."""
    if settings.ENV == "development":
        create_tables()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="CollegeConnect API",
    description="API de gestion des présences et des comptes étudiants / enseignants",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS — autorise tous les ports localhost en développement (à restreindre en production).
# allow_credentials=True : le client web envoie le cookie de session.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-User-Id", "X-Current-User", "X-Dev-Mode"],
)


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(attendance.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Corps ou paramètres invalides → 400 avec le détail par champ.
    La valeur reçue (input) n'est pas renvoyée : elle peut contenir un mot de passe.
    """
    errors = [
        {key: value for key, value in error.items() if key not in ("input", "ctx")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation error", "errors": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    Aucun détail interne n'est renvoyé au client.
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "CollegeConnect API", "version": "0.1.0"}
