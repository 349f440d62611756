from sqlalchemy import func
from sqlalchemy.orm import Session
from stockbook.models import InventoryItem, Role, Sale, User
from stockbook.security import get_password_hash


def get_user_by_email(db: Session, email: str):
    """Busca un usuario por email sin distinguir mayúsculas."""
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def create_user(db: Session, name: str, email: str, password: str, role: Role = Role.USER, **extra):
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        role=role,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Elimina el usuario dejando sin autor sus ventas y artículos. No hace commit."""
    db.query(Sale).filter(Sale.created_by_id == user.id).update(
        {Sale.created_by_id: None}, synchronize_session=False
    )
    db.query(InventoryItem).filter(InventoryItem.created_by_id == user.id).update(
        {InventoryItem.created_by_id: None}, synchronize_session=False
    )
    db.delete(user)
