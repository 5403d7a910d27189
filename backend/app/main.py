"""
Point d'entrée principal de l'API School Admin.
Démarrage : uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import app.models  # noqa: F401  enregistre tous les modèles dans Base.metadata avant les routers
from app.config import settings
from app.exceptions import AppError
from app.routers import (
    announcements,
    attendance,
    auth,
    classes,
    grades,
    parents,
    students,
    teachers,
    users,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

HTTP_ERRORS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    500: "Internal Server Error",
}


app = FastAPI(
    title="School Admin API",
    description="API multi-écoles de gestion scolaire : élèves, classes, présences, notes, annonces",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# CORS : tous les ports localhost en développement, CORS_ORIGINS en production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(students.router)
app.include_router(parents.router)
app.include_router(teachers.router)
app.include_router(classes.router)
app.include_router(attendance.router)
app.include_router(grades.router)
app.include_router(announcements.router)


def _error_response(status_code: int, message: str, error: str = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "message": message,
            "error": error or HTTP_ERRORS.get(status_code, "Error"),
        },
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Erreur métier %s sur %s : %s", exc.status_code, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Erreur de validation Pydantic → 400 avec le premier message lisible."""
    errors = exc.errors()
    if not errors:
        return _error_response(400, "Requête invalide.")
    first = errors[0]
    message = str(first.get("msg", "Requête invalide.")).removeprefix("Value error, ")
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    if field:
        message = f"{field} : {message}"
    return _error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return _error_response(500, "Une erreur interne est survenue.")


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "School Admin API", "version": "0.1.0"}
