"""
Router d'authentification : inscription d'une école, login, refresh, profil.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPair,
)
from app.schemas.user import UserResponse
from app.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/register", response_model=RegisterResponse, status_code=201, summary="Inscrire une école")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Crée l'école et son premier administrateur en une seule transaction."""
    return auth_service.register(db, data)


@router.post("/login", response_model=LoginResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, data.email, data.password)


@router.post("/refresh", response_model=TokenPair, summary="Renouveler les tokens")
def refresh(data: RefreshRequest, db: Session = Depends(get_db)):
    """Échange un refresh token contre une nouvelle paire access/refresh."""
    return auth_service.refresh_token(db, data.refresh_token)


@router.get("/me", response_model=UserResponse, summary="Profil de l'utilisateur connecté")
def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return auth_service.get_profile(db, current_user.id)
