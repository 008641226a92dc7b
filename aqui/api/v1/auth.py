from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from aqui.core.deps import get_current_user, get_db
from aqui.models.user import User
from aqui.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from aqui.schemas.user import UserOut
from aqui.services import auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register(db, body)
    request.session["user_id"] = str(user.id)
    return user


@router.post("/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, body.email, body.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    request.session["user_id"] = str(user.id)
    return AuthResponse(ok=True)


@router.post("/logout", response_model=AuthResponse)
def logout(request: Request):
    request.session.clear()
    return AuthResponse(ok=True)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
