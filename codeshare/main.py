from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.cors import CORSMiddleware

from codeshare.core.config import app_logger, settings
from codeshare.core.dependencies import get_async_session
from codeshare.core.exceptions.handlers import (
    exception_schema,
    register_exception_handlers,
)
from codeshare.core.exceptions.types import AppException
from codeshare.core.routers import (
    auth_router,
    execution_router,
    share_router,
    snippet_router,
)
from codeshare.core.services import (
    AuthService,
    BrevoService,
    EmailManagerService,
    ExecutionService,
    OTPService,
    Renderer,
    SessionService,
    ShareService,
)
from codeshare.core.utils import generate_openapi_json, write_to_file_async
from codeshare.infrastructure.scheduler import initialize_scheduler, scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info(f"{settings.APP_NAME} starting ({settings.ENVIRONMENT})")

    AuthService.init()
    OTPService.init()
    SessionService.init()
    ShareService.init()

    # Outbound HTTP clients
    await BrevoService.init(
        api_key=settings.BREVO_API_KEY,
        sender_email=settings.BREVO_SENDER_EMAIL,
        sender_name=settings.BREVO_SENDER_NAME,
    )
    await ExecutionService.init(
        base_url=settings.SANDBOX_URL,
        timeout=settings.SANDBOX_TIMEOUT_SECONDS,
    )

    Renderer.initialize()
    EmailManagerService.init()
    app_logger.info("Services ready: auth, otp, session, share, email, sandbox")

    if settings.ENABLE_SCHEDULER:
        scheduler.start()
        # jobs can only be added once the scheduler is running
        initialize_scheduler()
        app_logger.info("Housekeeping scheduler running")
    else:
        app_logger.info("Housekeeping scheduler disabled (ENABLE_SCHEDULER=false)")

    await write_to_file_async("openapi.json", generate_openapi_json(app))

    yield

    app_logger.info(f"{settings.APP_NAME} shutting down")
    if settings.ENABLE_SCHEDULER:
        scheduler.shutdown()
    await ExecutionService.aclose()
    await BrevoService.aclose()
    app_logger.info("Shutdown complete")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=settings.APP_DESCRIPTION,
    debug=settings.DEBUG,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    responses=exception_schema,
    root_path_in_servers=False,
    servers=[{"url": settings.API_DOMAIN}],
)

register_exception_handlers(app)

# Credentials must be allowed for the session cookie to cross origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, tags=["Authentication"])
app.include_router(snippet_router, tags=["Code"])
app.include_router(share_router, tags=["Sharing"])
app.include_router(execution_router, tags=["Execution"])


@app.get("/", include_in_schema=False)
async def root(request: Request):
    base_url = str(request.base_url).rstrip("/")
    return {
        "message": f"{settings.APP_NAME} API",
        "documentations": {
            "swagger": f"{base_url}/docs",
            "redoc": f"{base_url}/redoc",
        },
        "version": settings.APP_VERSION,
    }


@app.head("/health", include_in_schema=False)
@app.get("/health", summary="Service health")
async def health_check(session: Annotated[AsyncSession, Depends(get_async_session)]):
    """
    Report whether the API can reach its database.

    Returns 503 with the same body under ``details`` when a check fails.
    """
    checks = {"database": "ok"}
    try:
        async with session.begin():
            if (await session.execute(text("SELECT 1"))).scalar() != 1:
                checks["database"] = "unhealthy"
    except SQLAlchemyError as e:
        app_logger.error(f"Health check: database unreachable: {e}")
        checks["database"] = "unhealthy"

    healthy = all(value == "ok" for value in checks.values())
    report = {
        "status": "ok" if healthy else "degraded",
        "message": f"{settings.APP_NAME} API is running.",
        "checks": checks,
    }
    if not healthy:
        raise AppException(
            "One or more health checks failed.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=report,
        )
    return report
