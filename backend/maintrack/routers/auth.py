# backend/maintrack/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ..core.api import ok
from ..core.db import get_db
from ..core.security import create_access_token, get_current_user
from ..models.user import AppUser
from ..schemas.user import Token, UserCreate, UserRead, UserWithTeams
from ..services.user_service import authenticate, register_user

router = APIRouter(prefix="/auth", tags=["auth"])

# ---- Uçlar ----
@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    user = register_user(
        db,
        email=payload.email,
        full_name=payload.full_name,
        password=payload.password,
        role=payload.role,
    )
    return ok(UserRead.model_validate(user), status_code=status.HTTP_201_CREATED, message="User registered")

# OAuth2 formunda username alanı e-posta olarak kullanılır
@router.post("/login", response_model=Token)
def login(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = authenticate(db, email=form.username, password=form.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(user_id=user.UserID, role=user.Role)
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me")
def me(current: AppUser = Depends(get_current_user)):
    return ok(UserWithTeams.model_validate(current))
