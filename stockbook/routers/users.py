import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.models import Role, User
from stockbook.schemas.common import DataResponse, ListResponse
from stockbook.schemas.users import PasswordSet, UserCreate, UserRead, UserUpdate
from stockbook.crud.users import create_user as crud_create_user, delete_user as crud_delete_user, get_user_by_email
from stockbook.security import get_password_hash, require_roles
from stockbook.utils.listing import MAX_PAGE_SIZE, apply_sort, list_payload, paginate

logger = logging.getLogger(__name__)

# Toda la administración de usuarios es exclusiva del rol admin
router = APIRouter(dependencies=[Depends(require_roles(Role.ADMIN))])

SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "createdAt": User.created_at,
}


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User {user_id} not found")
    return user


# --- 1. LISTAR ---
@router.get("/", response_model=ListResponse[UserRead])
def read_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    search: str = "",
    role: Optional[Role] = None,
    sort: str = "-createdAt",
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if search:
        s = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(s), User.email.ilike(s)))
    if role is not None:
        query = query.filter(User.role == role)

    query = apply_sort(query, sort, SORT_COLUMNS, User.id)
    users, pagination = paginate(query, page, limit)
    return list_payload(users, pagination)


# --- 2. LEER POR ID ---
@router.get("/{user_id}", response_model=DataResponse[UserRead])
def read_user(user_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _get_user_or_404(db, user_id)}


# --- 3. CREAR ---
@router.post("/", response_model=DataResponse[UserRead], status_code=status.HTTP_201_CREATED)
def create_user(user_in: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, user_in.email):
        raise HTTPException(status_code=400, detail="A user with that email already exists")

    user = crud_create_user(
        db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=user_in.role,
        phone=user_in.phone,
        address=user_in.address,
    )
    logger.info("Created user %s (%s)", user.id, user.role.value)
    return {"success": True, "data": user}


# --- 4. ACTUALIZAR (nombre, email, rol...) ---
@router.put("/{user_id}", response_model=DataResponse[UserRead])
def update_user(user_id: int, user_in: UserUpdate, db: Session = Depends(get_db)):
    user_db = _get_user_or_404(db, user_id)
    update_data = user_in.model_dump(exclude_unset=True)

    if update_data.get("email"):
        existing = get_user_by_email(db, update_data["email"])
        if existing and existing.id != user_id:
            raise HTTPException(status_code=400, detail="A user with that email already exists")
        update_data["email"] = update_data["email"].lower()

    for field, value in update_data.items():
        if value is None and field in ("name", "email", "role", "is_active"):
            continue
        setattr(user_db, field, value)

    db.commit()
    db.refresh(user_db)
    logger.info("Updated user %s", user_id)
    return {"success": True, "data": user_db}


# --- 5. CAMBIO DE CONTRASEÑA ---
@router.put("/{user_id}/password", response_model=DataResponse[UserRead])
def set_user_password(user_id: int, payload: PasswordSet, db: Session = Depends(get_db)):
    user_db = _get_user_or_404(db, user_id)
    user_db.password_hash = get_password_hash(payload.password)
    db.commit()
    db.refresh(user_db)
    return {"success": True, "data": user_db}


# --- 6. ELIMINAR ---
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    user_db = _get_user_or_404(db, user_id)
    if user_db.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    crud_delete_user(db, user_db)
    db.commit()
    logger.info("Deleted user %s", user_id)
    return {"success": True, "data": {}}
