from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, declared_attr, sessionmaker, scoped_session, configure_mappers
import logging

from config import settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
    echo=settings.SQL_ECHO,
)

SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Thread-local sessions for scripts; requests get their own session from get_db
SessionLocal = scoped_session(SessionFactory)

# Base model with common functionality
class BaseModel:
    """Base model with common functionality."""

    @declared_attr
    def __tablename__(cls) -> str:
        return ''.join(['_'+i.lower() if i.isupper() else i for i in cls.__name__]).lstrip('_')

# Create declarative base with our custom BaseModel
Base = declarative_base(cls=BaseModel)

def init_models():
    """Import all models and configure mappers."""
    import models  # noqa: F401  registers every model on Base.metadata

    try:
        configure_mappers()
    except Exception as e:
        logger.error(f"Error configuring mappers: {e}")
        raise


def get_db():
    db = SessionFactory()
    try:
        yield db
    finally:
        db.close()
