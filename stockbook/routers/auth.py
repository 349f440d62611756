import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from stockbook.config import settings
from stockbook.database import get_db
from stockbook.models import Role, User
from stockbook.schemas.auth import (
    AuthResponse, ForgotPasswordRequest, LoginRequest, RegisterRequest,
    ResetPasswordRequest, Token, UpdateDetailsRequest, UpdatePasswordRequest,
)
from stockbook.schemas.common import DataResponse, MessageResponse
from stockbook.schemas.users import UserRead
from stockbook.crud.users import create_user, get_user_by_email
from stockbook.security import (
    create_user_token, generate_reset_token, get_current_user,
    get_password_hash, hash_reset_token, verify_password,
)
from stockbook.utils.mailer import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter()


def _authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# --- 1. REGISTRO ---
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="A user with that email already exists")

    # La primera cuenta del sistema queda como administrador
    role = Role.ADMIN if db.query(User.id).first() is None else Role.USER

    user = create_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=role,
        phone=payload.phone,
        address=payload.address,
    )
    logger.info("Registered user %s with role %s", user.id, role.value)
    return {"success": True, "token": create_user_token(user), "data": user}


# --- 2. LOGIN (JSON, usado por el frontend) ---
@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    return {"success": True, "token": create_user_token(user), "data": user}


# --- 3. LOGIN OAUTH2 (formulario estándar para /docs) ---
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    # OAuth2 siempre envía 'username'; aquí contiene el email
    user = _authenticate(db, form_data.username, form_data.password)
    return {"access_token": create_user_token(user), "token_type": "bearer"}


@router.get("/me", response_model=DataResponse[UserRead])
def read_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": current_user}


@router.get("/logout")
def logout(current_user: User = Depends(get_current_user)):
    """Los tokens no tienen estado en el servidor; el cliente simplemente lo descarta."""
    return {"success": True, "data": {}}


@router.put("/update-details", response_model=DataResponse[UserRead])
def update_details(
    payload: UpdateDetailsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    update_data = payload.model_dump(exclude_unset=True)

    if "email" in update_data and update_data["email"] is not None:
        existing = get_user_by_email(db, update_data["email"])
        if existing and existing.id != current_user.id:
            raise HTTPException(status_code=400, detail="A user with that email already exists")
        update_data["email"] = update_data["email"].lower()

    for field, value in update_data.items():
        if value is not None:
            setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return {"success": True, "data": current_user}


@router.put("/update-password", response_model=AuthResponse)
def update_password(
    payload: UpdatePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()
    db.refresh(current_user)
    return {"success": True, "token": create_user_token(current_user), "data": current_user}


# --- 4. RECUPERACIÓN DE CONTRASEÑA ---
@router.post("/forgotpassword", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=404, detail="There is no user with that email")

    raw_token, token_hash = generate_reset_token()
    user.reset_password_token = token_hash
    user.reset_password_expire = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes)
    db.commit()

    try:
        send_password_reset_email(user, raw_token)
    except OSError:
        logger.exception("Could not send reset email to %s", user.email)
        user.reset_password_token = None
        user.reset_password_expire = None
        db.commit()
        raise HTTPException(status_code=500, detail="Email could not be sent")

    return {"success": True, "message": "Password reset email sent"}


@router.put("/resetpassword/{reset_token}", response_model=AuthResponse)
def reset_password(reset_token: str, payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.reset_password_token == hash_reset_token(reset_token)).first()

    expire = user.reset_password_expire if user else None
    if expire is not None and expire.tzinfo is None:
        # SQLite devuelve fechas sin zona horaria
        expire = expire.replace(tzinfo=timezone.utc)

    if not user or expire is None or expire < datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user.password_hash = get_password_hash(payload.password)
    user.reset_password_token = None
    user.reset_password_expire = None
    db.commit()
    db.refresh(user)
    logger.info("Password reset for user %s", user.id)
    return {"success": True, "token": create_user_token(user), "data": user}
