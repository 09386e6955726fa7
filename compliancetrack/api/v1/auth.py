# compliancetrack/api/v1/auth.py
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from compliancetrack.core.auth import authenticate_user, get_current_user, get_db, get_user_by_email
from compliancetrack.core.security import create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from compliancetrack.crud.user import create_user
from compliancetrack.models.user import User
from compliancetrack.schemas.user import Token, UserCreate, UserOut

router = APIRouter()
log = logging.getLogger("compliancetrack.auth")


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = create_user(db, payload)
    log.info("User registered user_id=%s", user.id)
    return UserOut.model_validate(user)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    # lockout bookkeeping lives in authenticate_user (403 disabled / 423 locked)
    user = authenticate_user(db, (form_data.username or "").strip(), form_data.password)
    if not user:
        log.warning("Failed login for %r", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return Token(access_token=access_token)


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)
