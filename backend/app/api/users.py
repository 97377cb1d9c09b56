import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas.records import CamelModel
from ..services.field_mapping import USER_FIELDS, to_storage, user_to_api
from ..utils.error_handlers import get_error_message, handle_database_error
from ..utils.roles import admin_only
from ..utils.security import hash_password
from ..utils.validation import validate_email, validate_password, validate_role, validate_string_field

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class UserCreate(CamelModel):
    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    role: str | None = None
    password_change_required: bool | None = None


class UserUpdate(CamelModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    password_change_required: bool | None = None


def _clean(payload: dict, *, partial: bool) -> dict:
    if "username" in payload:
        payload["username"] = validate_string_field(payload["username"], "username", min_length=3, max_length=100)
    if "email" in payload:
        payload["email"] = validate_email(payload["email"])
    for key in ("firstName", "lastName"):
        if key in payload:
            payload[key] = validate_string_field(payload[key], key, max_length=100)
    if partial and payload.get("role") is None:
        payload.pop("role", None)
    else:
        payload["role"] = validate_role(payload.get("role"))
    return payload


def _hash(password: str) -> str:
    validate_password(password)
    try:
        return hash_password(password)
    except ValueError:
        raise HTTPException(status_code=400, detail=get_error_message("weak_password"))


def _ensure_unique(db: Session, *, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
    conditions = []
    if username:
        conditions.append(User.username == username)
    if email:
        conditions.append(User.email == email)
    if not conditions:
        return
    q = db.query(User).filter(or_(*conditions))
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=409, detail=get_error_message("user_exists"))


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=get_error_message("user_not_found"))
    return user


@router.get("")
def list_users(current=Depends(admin_only), db: Session = Depends(get_db)):
    try:
        users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "listing users")
    return {"success": True, "users": [user_to_api(u) for u in users]}


@router.post("", status_code=201)
def create_user(payload: UserCreate, current=Depends(admin_only), db: Session = Depends(get_db)):
    data = _clean(payload.to_payload(), partial=False)
    password_hash = _hash(payload.password)
    _ensure_unique(db, username=data.get("username"), email=data.get("email"))

    user = User(**to_storage(USER_FIELDS, data), password_hash=password_hash)
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "creating user")

    logger.info("Admin %s created user %s (%s)", current["id"], user.id, user.role)
    return {"success": True, "user": user_to_api(user)}


@router.put("/{user_id:int}")
def update_user(user_id: int, payload: UserUpdate, current=Depends(admin_only), db: Session = Depends(get_db)):
    user = _get_user(db, user_id)
    data = _clean(payload.to_payload(), partial=True)
    password = data.pop("password", None)

    if user.id == current["id"] and "role" in data and data["role"] != user.role:
        raise HTTPException(status_code=403, detail=get_error_message("own_role_change"))

    _ensure_unique(db, username=data.get("username"), email=data.get("email"), exclude_id=user.id)

    for column, value in to_storage(USER_FIELDS, data, partial=True).items():
        setattr(user, column, value)
    if password:
        user.password_hash = _hash(password)

    try:
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "updating user")

    logger.info("Admin %s updated user %s", current["id"], user.id)
    return {"success": True, "user": user_to_api(user)}


@router.delete("/{user_id:int}")
def delete_user(user_id: int, current=Depends(admin_only), db: Session = Depends(get_db)):
    if user_id == current["id"]:
        raise HTTPException(status_code=403, detail=get_error_message("own_account_delete"))

    user = _get_user(db, user_id)
    try:
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "deleting user")

    logger.info("Admin %s deleted user %s", current["id"], user_id)
    return {"success": True, "deleted_user_id": user_id}
