"""
Main FastAPI Application
Entry point for the backend server
"""
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from app.config import settings
from app.exceptions import WorkOrderError
from app.logging_config import setup_logging
from app.models.counter import Counter
from app.models.personal_task import PersonalTask
from app.models.profile import Profile, UserRole
from app.models.work_request import WorkRequest
from app.services.webhook import webhook_service

# Import routers
from app.api.routes import auth, requests, work_orders, calendar, analytics, dashboard, tasks


logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [WorkRequest, PersonalTask, Profile, Counter]


async def ensure_default_admin() -> None:
    """Create the first admin when no admin profile exists"""
    admin_count = await Profile.find(Profile.role == UserRole.ADMIN).count()
    if admin_count:
        return

    from app.api.routes.auth import get_password_hash

    admin = Profile(
        email=settings.DEFAULT_ADMIN_EMAIL,
        name=settings.DEFAULT_ADMIN_NAME,
        department="facilities",
        role=UserRole.ADMIN,
        password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
    )
    await admin.insert()
    logger.warning(
        "No admin profiles found; created default admin %s. Change its password.",
        settings.DEFAULT_ADMIN_EMAIL
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s %s", settings.APP_NAME, settings.APP_VERSION)

    # Initialize MongoDB
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    database = client[settings.MONGODB_DB_NAME]

    # Initialize Beanie with document models
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB_NAME)

    await ensure_default_admin()

    if not settings.WORK_REQUEST_WEBHOOK_URL:
        logger.info("WORK_REQUEST_WEBHOOK_URL not set; submission notifications are off")
    if not settings.DATE_CHANGE_WEBHOOK_URL:
        logger.info("DATE_CHANGE_WEBHOOK_URL not set; date change notifications are off")

    logger.info("Server running on %s:%s", settings.HOST, settings.PORT)

    yield

    # Shutdown
    logger.info("Shutting down")
    await webhook_service.close()
    client.close()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Facilities work order requests, scheduling and tracking",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkOrderError)
async def work_order_error_handler(request: Request, exc: WorkOrderError):
    """Domain errors become JSON with a stable error code"""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
            **({"details": exc.details} if exc.details else {}),
        },
    )


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(requests.router, prefix="/api/requests", tags=["Public Requests"])
app.include_router(work_orders.router, prefix="/api/work-orders", tags=["Work Orders"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["Calendar"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["Personal Tasks"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
