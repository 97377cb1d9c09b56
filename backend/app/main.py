import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import database
from .api import applications as applications_api
from .api import auth as auth_api
from .api import candidates as candidates_api
from .api import clients as clients_api
from .api import exports as exports_api
from .api import uploads as uploads_api
from .api import users as users_api
from .config import FRONTEND_ORIGINS, LOG_LEVEL, SESSION_TTL_SECONDS
from .services.bootstrap import add_missing_columns, seed_admin
from .services.sessions import SessionStore
from .services.template_settings import upload_root
from .utils.error_handlers import (
    AppError,
    create_error_response,
    format_validation_errors,
    get_error_message,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TalentForge Recruitment API")
app.state.session_store = SessionStore(SESSION_TTL_SECONDS)
app.state.db_init_error = None

app.include_router(auth_api.router)
app.include_router(users_api.router)
app.include_router(clients_api.router)
app.include_router(candidates_api.router)
app.include_router(applications_api.router)
app.include_router(exports_api.router)
app.include_router(uploads_api.router)

upload_root().mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(upload_root()), check_dir=False), name="uploads")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTPException with user-friendly messages."""
    response = create_error_response(exc.status_code, str(exc.detail))
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    message = format_validation_errors(exc.errors())
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return create_error_response(400, message)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
    response = create_error_response(exc.status_code, exc.message, exc.details or None)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(OperationalError)
async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database operational errors."""
    logger.exception("Database OperationalError: %s", exc)
    return create_error_response(503, get_error_message("database_error"))


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general database errors."""
    logger.exception("Database SQLAlchemyError: %s", exc)
    return create_error_response(500, get_error_message("database_error"))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors globally."""
    logger.exception("Unhandled exception: %s", exc)
    return create_error_response(500, get_error_message("server_error"))


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "Backend running",
        "service": "TalentForge Recruitment API",
    }


_default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=[*_default_origins, *FRONTEND_ORIGINS],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    try:
        database.init_db()
        add_missing_columns(database.engine)
        db = database.SessionLocal()
        try:
            seed_admin(db)
        finally:
            db.close()
        app.state.db_init_error = None
    except Exception as e:
        # Keep serving so /db/health can report the problem.
        logger.exception("Database initialization failed: %s", e)
        app.state.db_init_error = str(e)


@app.get("/db/health")
def db_health():
    """Database connectivity check."""
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "error": get_error_message("database_error"),
                "status_code": 503,
                "dialect": database.engine.dialect.name,
            },
        )

    if app.state.db_init_error:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "error": "Database initialization failed",
                "details": app.state.db_init_error,
                "status_code": 503,
            },
        )

    return {"success": True, "status": "ok", "dialect": database.engine.dialect.name}
