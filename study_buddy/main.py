from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from study_buddy.api import auth, chat, moods, subjects, users
from study_buddy.core.config import settings
from study_buddy.core.database import engine, init_db
from study_buddy.core.errors import AppError
from study_buddy.utils.logger import init_logging, get_logger, set_request_id, clear_request_id
import uuid

# Initialize logging
init_logging()
logger = get_logger("study_buddy.main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("Backend server started", extra={
        "database": engine.dialect.name,
        "openrouter_configured": bool(settings.OPENROUTER_API_KEY),
    })
    yield
    await engine.dispose()
    logger.info("Backend server shutting down")


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = str(uuid.uuid4())[:8]
    set_request_id(request_id)
    logger.info("Request started", extra={
        "method": request.method,
        "path": request.url.path,
    })
    try:
        response = await call_next(request)
        logger.info("Request completed", extra={
            "status_code": response.status_code,
        })
        return response
    except Exception as e:
        logger.error("Request failed", extra={"error": str(e)})
        raise
    finally:
        clear_request_id()


# ------ Error handlers: every failure becomes {"error": message} -----
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Request error", extra={
        "path": request.url.path,
        "status_code": exc.status_code,
        "error_type": type(exc).__name__,
        "error": exc.message,
    })
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    logger.warning("Validation failed", extra={"path": request.url.path, "error": message})
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = "Endpoint not found"
    else:
        message = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=getattr(exc, "headers", None))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error", extra={"path": request.url.path, "error": str(exc)}, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Routes
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(chat.router)
app.include_router(moods.router)
app.include_router(subjects.router)

# Front-end assets, when a build directory is configured
if settings.STATIC_DIR and Path(settings.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")

def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
