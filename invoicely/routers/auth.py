"""
Kimlik dogrulama router'i.

Endpoint'ler:
    POST /register -> Yeni kullanici
    POST /login    -> JWT token al (form: username = email)
    GET  /me       -> Giris yapmis kullanicinin bilgisi
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.dependencies import get_current_user
from invoicely.rate_limit import limiter
from invoicely.models.user import User
from invoicely.schemas.user import UserCreate, UserResponse, Token
from invoicely.services import auth as auth_service

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(
    request: Request,
    data: UserCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Yeni kullanici kaydi. Email benzersiz olmali, sifre en az 8 karakter."""
    return auth_service.register_user(db, data)


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
def login(
    request: Request,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
):
    user = auth_service.authenticate_user(db, form_data.username, form_data.password)
    return Token(access_token=auth_service.create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    return current_user
