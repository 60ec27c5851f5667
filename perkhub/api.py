from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from . import schemas
from .auth import create_access_token, get_current_user
from .db import get_db
from .models import User
from .perks import router as perks_router
from .services.user_store import UserStore

router = APIRouter()


def _auth_result(user: User) -> dict:
    return {"user": user, "token": create_access_token(user.id), "token_type": "bearer"}


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@router.get("/health")
def health():
    return {"ok": True}


@router.post("/auth/register", response_model=schemas.AuthResult, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    user = UserStore(db).register(payload.name, payload.email, payload.password)
    return _auth_result(user)


@router.post("/auth/login", response_model=schemas.AuthResult)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = UserStore(db).authenticate(payload.email, payload.password)
    return _auth_result(user)


@router.get("/auth/me", response_model=schemas.UserResult)
def me(user: User = Depends(get_current_user)):
    return {"user": user}


@router.delete("/auth/me", response_model=schemas.OkResult)
def delete_me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Permanently delete the currently authenticated user and all their perks.
    """
    UserStore(db).delete(user)
    return {"ok": True}


router.include_router(perks_router, prefix="/perks", tags=["perks"])
