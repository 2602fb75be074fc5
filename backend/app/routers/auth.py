"""Registration, login and the caller's own profile."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from .. import models, services
from ..auth import TokenService, get_current_user, get_token_service
from ..database import get_session
from ..schemas import LoginIn, RegisterIn, TokenOut, dump

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new user and return the created profile."""
    user = services.AuthService(db, tokens).register(payload)
    return dump(user)


@router.post("/login", response_model=TokenOut)
def login(
    payload: LoginIn,
    db: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate and return a bearer token."""
    token = services.AuthService(db, tokens).login(payload.email, payload.password)
    return TokenOut(access_token=token)


@router.get("/me")
def me(user: models.User = Depends(get_current_user)):
    return dump(user)
