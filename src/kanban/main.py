import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .board import get_task_store
from .logging_setup import setup_logging
from .settings import get_settings
from .routers import tasks as tasks_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Board view and task operations: create, edit, advance and delete.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load the saved board before the first request is served
    store = app.dependency_overrides.get(get_task_store, get_task_store)()
    logger.info("Board ready with %d task(s), backend=%s", store.count(), _settings.persistence_backend)
    yield


app = FastAPI(
    title="Kanban Board",
    description="Single-user task board with To Do, In Progress and Done columns, saved to a local store.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": _jsonable_errors(exc),
        },
    )


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raised exception object, which is not JSON serializable;
    # input is dropped because it may hold text that cannot be encoded as UTF-8
    errors = []
    for err in exc.errors():
        err = dict(err)
        err.pop("input", None)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(tasks_router.router)
