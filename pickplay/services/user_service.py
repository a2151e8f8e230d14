"""Actor store lookups."""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from pickplay.models.user import Role, User


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username).limit(1))


def get_user_by_login(db: Session, login: str) -> User | None:
    """Resolve a staff account by username or email."""
    value = login.strip()
    return db.scalar(select(User).where(or_(User.username == value, User.email == value)).limit(1))


def get_role_by_name(db: Session, name: str) -> Role | None:
    return db.scalar(select(Role).where(Role.name == name).limit(1))


def create_user(
    db: Session,
    username: str,
    hashed_password: str,
    role_name: str,
    email: str | None = None,
) -> User:
    role = get_role_by_name(db, role_name)
    if role is None:
        raise ValueError(f"Unknown role: {role_name}")
    user = User(username=username, password_hash=hashed_password, role_id=role.id, email=email, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
