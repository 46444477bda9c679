from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from routers import (
    auth, profiles, articles, library, submissions, reviews, reviewer_applications,
    editorial_board, admin, functions,
)
from database import init_async_db
from config import settings, setup_logging
from exceptions import AppError
from middleware import LoggingMiddleware
from pydantic import ValidationError
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

# Setup logging first
logger, request_id_filter = setup_logging()

logger.info(f"Starting {settings.JOURNAL_NAME} API {settings.SETTING_VERSION}")

OPENAPI_TAGS = [
    {"name": "auth", "description": "Registration, sign-in and the emailed account links"},
    {"name": "articles", "description": "Published issues, comments and likes; article management for editors"},
    {"name": "library", "description": "A reader's saved articles and reading history"},
    {"name": "profiles", "description": "Personal and professional profiles"},
    {"name": "submissions", "description": "Manuscript submission and the editorial pipeline"},
    {"name": "reviews", "description": "Peer review assignments and the reviewer dashboard"},
    {"name": "reviewer-applications", "description": "Applications to join the reviewer pool"},
    {"name": "editorial-board", "description": "The journal's editorial board"},
    {"name": "admin", "description": "Users, roles and editorial statistics"},
    {"name": "functions", "description": "Notification endpoints called by the client and the auth provider"},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.SETTING_VERSION,
    openapi_tags=OPENAPI_TAGS,
    swagger_ui_parameters={
        "persistAuthorization": True,
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": -1,
    }
)

app.add_middleware(LoggingMiddleware, request_id_filter=request_id_filter)

# Clients replace their stored token when a role change issues X-New-Token
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
    expose_headers=list(settings.CORS_EXPOSE_HEADERS) + ["X-New-Token"],
)


@app.middleware("http")
async def token_refresh_middleware(request: Request, call_next):
    """
    Copy a token issued during validation into the X-New-Token header.

    validate_token() issues a new token when the roles in the presented one
    no longer match the store (a role was granted or revoked by an admin),
    and leaves it on request.state.new_token.
    """
    response = await call_next(request)

    new_token = getattr(request.state, 'new_token', None)
    if new_token:
        response.headers["X-New-Token"] = new_token

    return response


app.include_router(
    auth.router,
    prefix="/api/auth",
    tags=["auth"],
    responses={401: {"description": "Not authenticated"}}
)

# Readers
app.include_router(articles.router)
app.include_router(editorial_board.router)
app.include_router(profiles.router)
app.include_router(library.router)

# Authors and reviewers
app.include_router(submissions.router)
app.include_router(reviews.router)
app.include_router(reviewer_applications.router)

# Editorial office
app.include_router(admin.router)
app.include_router(functions.router)


@app.on_event("startup")
async def startup_event():
    await init_async_db()
    logger.info("Database ready")


@app.get("/")
async def root():
    return {"message": f"{settings.JOURNAL_NAME} API", "health": "/api/health", "docs": "/docs"}


@app.get("/api/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {"status": "healthy", "version": settings.SETTING_VERSION}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Service-layer errors carry their own status code and user-facing message."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} in {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Response models that fail validation; a server-side bug, logged in full."""
    logger.error(f"Pydantic ValidationError in {request.url.path}:")
    for error in exc.errors():
        logger.error(f"  - {error['loc']}: {error['msg']} (type: {error['type']})")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Rejected input: empty comments, unknown statuses, recommendations or roles."""
    logger.warning(
        f"Rejected input on {request.method} {request.url.path}: "
        + "; ".join(f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in exc.errors())
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception in {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Something went wrong. Please try again."}
    )
