import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import SESSION_COOKIE_NAME, SESSION_TTL_SECONDS
from ..database import get_db
from ..models.user import User
from ..schemas.records import CamelModel
from ..services.field_mapping import user_to_api
from ..utils.dependencies import get_session_store
from ..utils.error_handlers import get_error_message, handle_database_error
from ..utils.jwt import create_user_token
from ..utils.roles import staff_only
from ..utils.security import hash_password, verify_password
from ..utils.validation import validate_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(CamelModel):
    email: str  # email address or username
    password: str


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


def _load_user(db: Session, user_id: int) -> User:
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "loading user")
    if not user:
        raise HTTPException(status_code=404, detail=get_error_message("user_not_found"))
    return user


@router.post("/login")
def login(payload: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    identifier = (payload.email or "").strip()
    if not identifier or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    try:
        user = (
            db.query(User)
            .filter(or_(User.email == identifier.lower(), User.username == identifier))
            .first()
        )
    except SQLAlchemyError as e:
        raise handle_database_error(e, "login")

    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login attempt for %s", identifier)
        raise HTTPException(status_code=401, detail=get_error_message("invalid_credentials"))

    token = create_user_token(user)
    session_id = get_session_store(request).create(token=token, user_id=user.id)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_id,
        max_age=SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
    )

    logger.info("User %s logged in", user.id)
    return {"success": True, "user": user_to_api(user), "token": token}


@router.post("/logout")
def logout(request: Request, response: Response):
    get_session_store(request).discard(request.cookies.get(SESSION_COOKIE_NAME))
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me")
def me(current=Depends(staff_only), db: Session = Depends(get_db)):
    user = _load_user(db, current["id"])
    return {"success": True, "user": user_to_api(user)}


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    current=Depends(staff_only),
    db: Session = Depends(get_db),
):
    user = _load_user(db, current["id"])
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail=get_error_message("wrong_current_password"))

    validate_password(payload.new_password)
    try:
        user.password_hash = hash_password(payload.new_password)
    except ValueError:
        raise HTTPException(status_code=400, detail=get_error_message("weak_password"))
    user.password_change_required = False

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, "changing password")

    logger.info("User %s changed their password", user.id)
    return {"success": True, "message": "Password updated successfully"}
