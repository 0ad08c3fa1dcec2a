"""
Main application entry point.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from staff_directory.api import api_router
from staff_directory.api.error_handlers import register_error_handlers
from staff_directory.core.config import settings, print_config_info
from staff_directory.db.mongodb import mongodb
from staff_directory.domains.employees.repository import EmployeeRepository
from staff_directory.domains.users.repository import UserRepository
from staff_directory.domains.users.service import user_service

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Event triggered on application startup."""
    print_config_info()

    mongodb.connect_to_mongodb()

    # Unique indexes are the authoritative guard for email uniqueness
    await EmployeeRepository().ensure_indexes()
    await UserRepository().ensure_indexes()

    await user_service.ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)

    logger.info("Application started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Event triggered on application shutdown."""
    await mongodb.close_mongodb_connection()

    logger.info("Application shutdown")


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}
