from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from config import settings
import logging

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # Single shared connection so an in-memory database survives across sessions
        return create_engine(
            url,
            echo=settings.DEBUG,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args={
            "connect_timeout": 15,
            "charset": "utf8mb4",
            "autocommit": False
        }
    )


engine = _build_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Create base class for models
Base = declarative_base()


# Dependency for FastAPI routes
def get_db():
    """
    Get database session for dependency injection in FastAPI routes
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Function to initialize database tables
def init_db():
    """
    Create all database tables
    """
    # Register every table on Base.metadata before create_all
    import models  # noqa: F401

    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables created successfully")
    except Exception as e:
        logger.error(f"❌ Failed to create database tables: {str(e)}", exc_info=True)
        raise


# Function to check database connection
def check_db_connection():
    """
    Test database connection
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("✅ Database connection successful")
            return True
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        return False
