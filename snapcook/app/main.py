import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette import status

from snapcook.app.api.routes import api_router
from snapcook.app.core.config import get_settings, log_credential_status
from snapcook.app.core.errors import RecipeExtractionError

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append(f"{loc}: {msg}" if loc else msg)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request payload", "detail": "; ".join(details)},
    )


async def recipe_extraction_error_handler(request: Request, exc: RecipeExtractionError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "detail": str(exc)},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="SnapCook", version="0.1.0")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RecipeExtractionError, recipe_extraction_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.on_event("startup")
    async def startup_event() -> None:
        log_credential_status(settings)
        logger.info("SnapCook starting in %s mode", settings.app_env)

    return app


app = create_app()
