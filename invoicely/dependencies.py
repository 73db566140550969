import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.models.user import User
from invoicely.services.auth import verify_token

# Swagger UI'da "Authorize" butonu; token zorunlu degil (misafir modu)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


@dataclass(frozen=True)
class SessionContext:
    """
    Istegin kimlik bilgisi: giris yapmis kullanici veya misafir.
    Servisler kimligi bu nesneden alir, global bir "aktif kullanici" yoktur.
    """

    user: User | None = None
    guest_token: str | None = None

    @property
    def is_guest(self) -> bool:
        return self.user is None

    @property
    def owner_id(self) -> uuid.UUID | None:
        return self.user.id if self.user is not None else None

    @property
    def session_key(self) -> str:
        """Taslak sahipligi icin anahtar."""
        if self.user is not None:
            return f"user:{self.user.id}"
        return f"guest:{self.guest_token}"

    @classmethod
    def guest(cls, token: str | None = None) -> "SessionContext":
        return cls(guest_token=token or uuid.uuid4().hex)


def _read_token(request: Request, token: str | None) -> str | None:
    # Oncelik: Authorization header, sonra cookie
    return token or request.cookies.get("access_token")


def _load_user(db: Session, token: str) -> User:
    user_id = verify_token(token)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return user


def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Giris zorunlu endpoint'ler icin: token yoksa 401."""
    token = _read_token(request, token)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _load_user(db, token)


def get_session_context(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
    x_guest_token: Annotated[str | None, Header()] = None,
) -> SessionContext:
    """
    Token varsa kullanici, yoksa misafir oturumu.
    Gecersiz token misafire dusmez, 401 verir.
    Misafirler taslaklarina X-Guest-Token header'i ile erisir.
    """
    token = _read_token(request, token)
    if token:
        return SessionContext(user=_load_user(db, token))
    return SessionContext.guest(x_guest_token)


def require_member(
    ctx: Annotated[SessionContext, Depends(get_session_context)],
) -> SessionContext:
    """Kaydetme ve katalog gibi sadece uyelere acik islemler."""
    if ctx.is_guest:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This action is not available in guest mode. Please sign in.",
        )
    return ctx
