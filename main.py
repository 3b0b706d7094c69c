from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
import logging

# Load environment variables
load_dotenv()

from config import settings
from core.exceptions import AppError, InternalError
from core.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

# Initialize database models
from database import init_models

init_models()

from routers import auth, comments, users, videos
from startup import create_tables, create_upload_dirs

app = FastAPI(
    title="VidShare API",
    description="Video sharing backend: uploads, comments, likes and dislikes, subscriptions.",
    version="1.0.0",
    openapi_tags=[
        {"name": "Authentication", "description": "Register, login and the current user"},
        {"name": "Videos", "description": "Uploading, browsing and reacting to videos"},
        {"name": "Comments", "description": "Replies and reactions on comments"},
        {"name": "Users", "description": "Profiles and channel subscriptions"},
    ]
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

create_tables()
create_upload_dirs()

# Serve uploaded media
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_ROOT, check_dir=False), name="uploads")

# Include routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(videos.router, prefix="/videos", tags=["Videos"])
app.include_router(comments.router, prefix="/comments", tags=["Comments"])
app.include_router(users.router, prefix="/users", tags=["Users"])


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, InternalError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.context}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": jsonable_errors(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"message": "Server error"})


def jsonable_errors(errors):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]


@app.get("/", summary="Root endpoint")
def root():
    return {"message": "Welcome to VidShare API. Use /docs for Swagger UI."}


@app.get("/health")
async def health_check():
    return JSONResponse(
        status_code=200,
        content={"status": "ok", "message": "Service is running"}
    )
