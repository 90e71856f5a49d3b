from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from config import settings
from utils.responses import error_response
import uvicorn
import logging
import os

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import routes
from routes import (
    users_router,
    payments_router,
    goals_router,
    dashboard_router,
    fuel_router,
    trips_router,
    notifications_router
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ride Earnings - daily earnings, goals and fuel tracking API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,  # Must be False when allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)


# Global exception handler with CORS headers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return error_response(
        message="Internal server error",
        errors=str(exc) if settings.DEBUG else None,
        status_code=500,
        headers=CORS_HEADERS
    )


# HTTPException handler with CORS headers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(
        message=exc.detail,
        status_code=exc.status_code,
        headers=CORS_HEADERS
    )


# Health check endpoint
@app.get("/")
def root():
    return {
        "success": True,
        "message": f"{settings.APP_NAME} is running",
        "version": settings.APP_VERSION
    }


@app.get("/health")
def health_check():
    return {
        "success": True,
        "message": "Service is healthy",
        "status": "ok"
    }


@app.get("/health/db")
def health_check_db():
    """Check database connectivity"""
    from database import check_db_connection
    if check_db_connection():
        return {
            "success": True,
            "message": "Database connection successful",
            "status": "ok"
        }
    return {
        "success": False,
        "message": "Database connection failed",
        "status": "error"
    }


# Include routers with /api prefix
app.include_router(users_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(goals_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(fuel_router, prefix="/api")
app.include_router(trips_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")


# Startup event
@app.on_event("startup")
def startup_event():
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} is starting...")
    logger.info("📚 Documentation available at: /docs")

    # Initialize Redis cache
    try:
        from utils.cache import cache
        if cache.enabled:
            logger.info("✅ Redis cache is connected and ready!")
        elif settings.REDIS_ENABLED:
            logger.warning("⚠️ Redis is configured but not reachable - caching disabled")
        else:
            logger.info("ℹ️ Redis caching is disabled (no REDIS_URL configured)")
    except Exception as e:
        logger.warning(f"⚠️ Redis initialization check failed: {e}")

    # Initialize database tables
    try:
        from database import init_db
        logger.info("📊 Initializing database tables...")
        init_db()
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {str(e)}", exc_info=True)

    logger.info("✅ API ready to receive requests")


# Shutdown event
@app.on_event("shutdown")
def shutdown_event():
    from services.trip_sessions import trip_sessions
    trip_sessions.close_all()
    logger.info(f"👋 Shutting down {settings.APP_NAME}...")


# Run the application
if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=port,
        reload=settings.DEBUG,
        log_level="info"
    )
